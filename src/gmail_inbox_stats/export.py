"""Export statistics to CSV or JSON."""

import csv
import json

from .models import SenderSummary
from .stats import StatsSnapshot


def export_stats(
    snapshot: StatsSnapshot,
    top_senders: list[SenderSummary],
    format: str,
    output_path: str,
) -> None:
    """Export statistics to a file.

    Args:
        snapshot: The statistics to export.
        top_senders: Senders ranked by message count.
        format: Output format, either 'csv' or 'json'.
        output_path: Path to write the output file.

    CSV holds one row per sender in the order of ``top_senders``; JSON holds
    the full snapshot plus the ranked senders.
    """
    if format == "csv":
        with open(output_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=["email", "count", "total_bytes"])
            writer.writeheader()
            for sender in top_senders:
                writer.writerow(
                    {
                        "email": sender.email,
                        "count": sender.count,
                        "total_bytes": sender.total_bytes,
                    }
                )
    elif format == "json":
        data = snapshot.to_dict()
        data["topSenders"] = [s.to_dict() for s in top_senders]
        with open(output_path, "w") as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unsupported export format: {format}")

    print(f"Results saved to {output_path}")
