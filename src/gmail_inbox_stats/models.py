"""Data models for Gmail Inbox Stats."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class EmailMetadata:
    """Metadata extracted from a single Gmail message."""

    id: str
    thread_id: str = ""
    sender: str = ""  # Extracted email address
    recipients: tuple[str, ...] = ()
    subject: str = ""
    date: datetime | None = None  # None when the Date header could not be parsed
    snippet: str = ""
    label_ids: frozenset[str] = frozenset()
    size_estimate: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "threadId": self.thread_id,
            "from": self.sender,
            "to": list(self.recipients),
            "subject": self.subject,
            "date": self.date.isoformat() if self.date else None,
            "snippet": self.snippet,
            "labelIds": sorted(self.label_ids),
            "sizeEstimate": self.size_estimate,
        }


@dataclass
class RawMessage:
    """Message detail as returned by the mail provider, headers still unparsed."""

    id: str
    thread_id: str = ""
    label_ids: list[str] = field(default_factory=list)
    snippet: str = ""
    size_estimate: int = 0
    headers: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class MessagePage:
    """One page of message ids from the listing call."""

    ids: list[str] = field(default_factory=list)
    next_page_token: str | None = None


@dataclass(frozen=True)
class SenderSummary:
    """A sender with its message count and cumulative size."""

    email: str
    count: int
    total_bytes: int

    def to_dict(self) -> dict:
        return {"email": self.email, "count": self.count, "size": self.total_bytes}


@dataclass(frozen=True)
class Progress:
    """Point-in-time status of an ingestion run."""

    total_processed: int
    is_running: bool
    failed: int = 0
    pages: int = 0
    cancelled: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "totalEmails": self.total_processed,
            "isProcessing": self.is_running,
            "failed": self.failed,
            "pages": self.pages,
            "cancelled": self.cancelled,
            "error": self.error,
        }
