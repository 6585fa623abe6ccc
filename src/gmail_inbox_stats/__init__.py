"""Gmail Inbox Stats - concurrent mailbox ingestion and sender statistics."""

__version__ = "0.1.0"
