"""Tests for the export module."""

import csv
import json

import pytest

from gmail_inbox_stats.export import export_stats
from gmail_inbox_stats.models import SenderSummary
from gmail_inbox_stats.stats import StatsSnapshot


@pytest.fixture
def snapshot() -> StatsSnapshot:
    return StatsSnapshot(
        from_count={"a@x.com": 3, "b@x.com": 1},
        to_count={"me@x.com": 4},
        from_size={"a@x.com": 300, "b@x.com": 10},
        date_count={"2024-01-15": 4},
        total_emails=4,
    )


@pytest.fixture
def senders() -> list[SenderSummary]:
    return [SenderSummary("a@x.com", 3, 300), SenderSummary("b@x.com", 1, 10)]


def test_export_csv(tmp_path, snapshot, senders):
    out = tmp_path / "out.csv"
    export_stats(snapshot, senders, format="csv", output_path=str(out))

    with open(out, newline="") as f:
        rows = list(csv.DictReader(f))
    assert rows == [
        {"email": "a@x.com", "count": "3", "total_bytes": "300"},
        {"email": "b@x.com", "count": "1", "total_bytes": "10"},
    ]


def test_export_json(tmp_path, snapshot, senders):
    out = tmp_path / "out.json"
    export_stats(snapshot, senders, format="json", output_path=str(out))

    data = json.loads(out.read_text())
    assert data["totalEmails"] == 4
    assert data["dateCount"] == {"2024-01-15": 4}
    assert data["topSenders"][0] == {"email": "a@x.com", "count": 3, "size": 300}


def test_export_unknown_format(tmp_path, snapshot, senders):
    with pytest.raises(ValueError):
        export_stats(snapshot, senders, format="xml", output_path=str(tmp_path / "out.xml"))
