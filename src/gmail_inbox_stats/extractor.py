"""Helpers for turning raw Gmail messages into EmailMetadata."""

from __future__ import annotations

import re
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any

from gmail_inbox_stats.constants import (
    DATE_FORMATS,
    HEADER_DATE,
    HEADER_FROM,
    HEADER_SUBJECT,
    HEADER_TO,
)
from gmail_inbox_stats.models import EmailMetadata, RawMessage

_TRAILING_COMMENT_RE = re.compile(r"\s*\([^)]*\)\s*$")


def extract_address(value: str) -> str:
    """Extract the address part of a From/To header value.

    Handles formats like:
      "John Doe <john@example.com>" -> "john@example.com"
      "<john@example.com>"          -> "john@example.com"
      "john@example.com"            -> "john@example.com"
    """
    if not value:
        return ""
    start = value.find("<")
    end = value.rfind(">")
    if start != -1 and end != -1 and start + 1 < end:
        return value[start + 1 : end].strip()
    return value.strip()


def split_addresses(value: str) -> list[str]:
    """Split a To header on commas that are not inside quotes or angle brackets."""
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    depth = 0

    for ch in value or "":
        if ch == '"':
            in_quotes = not in_quotes
        elif not in_quotes and ch == "<":
            depth += 1
        elif not in_quotes and ch == ">" and depth:
            depth -= 1
        elif ch == "," and not in_quotes and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))

    addresses = []
    for part in parts:
        address = extract_address(part)
        if address:
            addresses.append(address)
    return addresses


def parse_date(value: str) -> datetime | None:
    """Parse a Date header, returning None when no known layout matches.

    The RFC 2822 parser is tried first, then each layout in DATE_FORMATS
    against the value with any trailing "(TZ)" comment removed.
    """
    if not value or not value.strip():
        return None
    value = value.strip()

    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError, OverflowError):
        pass

    candidates = [value]
    stripped = _TRAILING_COMMENT_RE.sub("", value)
    if stripped != value:
        candidates.append(stripped)

    for fmt in DATE_FORMATS:
        for candidate in candidates:
            try:
                return datetime.strptime(candidate, fmt)
            except ValueError:
                continue
    return None


def extract_metadata(raw: RawMessage) -> EmailMetadata:
    """Build an EmailMetadata from a RawMessage.

    Header names are matched case-insensitively. Missing headers leave the
    corresponding field at its default; this function does not raise on
    malformed values.
    """
    sender = ""
    recipients: list[str] = []
    subject = ""
    date: datetime | None = None

    for name, value in raw.headers:
        key = (name or "").lower()
        value = value or ""
        if key == HEADER_FROM:
            sender = extract_address(value)
        elif key == HEADER_TO:
            recipients.extend(split_addresses(value))
        elif key == HEADER_SUBJECT:
            subject = value
        elif key == HEADER_DATE:
            date = parse_date(value)

    return EmailMetadata(
        id=raw.id,
        thread_id=raw.thread_id,
        sender=sender,
        recipients=tuple(recipients),
        subject=subject,
        date=date,
        snippet=raw.snippet,
        label_ids=frozenset(raw.label_ids),
        size_estimate=raw.size_estimate,
    )


def message_from_api(response: dict[str, Any]) -> RawMessage:
    """Convert a Gmail API messages.get response into a RawMessage."""
    headers = []
    for h in (response.get("payload") or {}).get("headers") or []:
        name = h.get("name")
        value = h.get("value")
        if isinstance(name, str) and isinstance(value, str):
            headers.append((name, value))

    label_ids = response.get("labelIds") or []
    try:
        size_estimate = int(response.get("sizeEstimate") or 0)
    except (TypeError, ValueError):
        size_estimate = 0

    return RawMessage(
        id=str(response.get("id") or ""),
        thread_id=str(response.get("threadId") or ""),
        label_ids=[str(x) for x in label_ids if isinstance(x, str)],
        snippet=response.get("snippet") or "",
        size_estimate=size_estimate,
        headers=headers,
    )
