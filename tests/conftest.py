"""Shared fixtures for tests."""

from __future__ import annotations

import json
import logging
import threading

import pytest

from gmail_inbox_stats.exceptions import ListingFetchError, MessageFetchError, MessageTrashError
from gmail_inbox_stats.models import MessagePage, RawMessage


def _make_raw(
    message_id: str,
    sender: str = "Alice <alice@example.com>",
    to: list[str] | None = None,
    date: str | None = "Mon, 15 Jan 2024 10:30:00 +0000",
    size: int = 100,
    subject: str = "Hello",
) -> RawMessage:
    headers = [("From", sender), ("Subject", subject)]
    for value in to if to is not None else ["Me <me@example.com>"]:
        headers.append(("To", value))
    if date is not None:
        headers.append(("Date", date))
    return RawMessage(
        id=message_id,
        thread_id=f"t_{message_id}",
        label_ids=["INBOX"],
        snippet=f"snippet {message_id}",
        size_estimate=size,
        headers=headers,
    )


class _FakeMailboxClient:
    """In-memory MailboxClient.

    ``pages`` maps a page token (None for the first page) to
    ``(ids, next_page_token)``. Listing a token in ``gates`` blocks until the
    matching event is set.
    """

    def __init__(
        self,
        pages: dict[str | None, tuple[list[str], str | None]],
        messages: dict[str, RawMessage],
        failing_ids: set[str] | None = None,
        failing_tokens: set[str | None] | None = None,
        gates: dict[str | None, threading.Event] | None = None,
    ) -> None:
        self.pages = pages
        self.messages = messages
        self.failing_ids = failing_ids or set()
        self.failing_tokens = failing_tokens or set()
        self.gates = gates or {}
        self.list_calls: list[tuple[str | None, int]] = []
        self.get_calls: list[str] = []
        self.trashed: list[str] = []
        self._lock = threading.Lock()

    def list_messages(self, page_token: str | None = None, page_size: int = 100) -> MessagePage:
        with self._lock:
            self.list_calls.append((page_token, page_size))
        gate = self.gates.get(page_token)
        if gate is not None:
            gate.wait(5)
        if page_token in self.failing_tokens:
            raise ListingFetchError("Failed to fetch messages: 401 Unauthorized")
        ids, next_token = self.pages[page_token]
        return MessagePage(ids=list(ids), next_page_token=next_token)

    def get_message(self, message_id: str) -> RawMessage:
        with self._lock:
            self.get_calls.append(message_id)
        if message_id in self.failing_ids:
            raise MessageFetchError(message_id, "503 backend error")
        return self.messages[message_id]

    def list_inbox(self, query: str = "in:inbox", max_results: int = 10) -> list[dict]:
        ids = self.pages[None][0] if None in self.pages else []
        return [{"id": i, "threadId": f"t_{i}"} for i in ids[:max_results]]

    def trash_message(self, message_id: str) -> None:
        if message_id in self.failing_ids or message_id not in self.messages:
            raise MessageTrashError(message_id, "404 Not Found")
        with self._lock:
            self.trashed.append(message_id)


@pytest.fixture(autouse=True)
def _restore_logging():
    """The CLI reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def raw_message():
    """Factory for RawMessage objects with sensible headers."""
    return _make_raw


@pytest.fixture
def fake_mailbox():
    """The in-memory MailboxClient class, for tests that build their own pages."""
    return _FakeMailboxClient


@pytest.fixture
def three_messages() -> dict[str, RawMessage]:
    return {
        "m1": _make_raw("m1", sender="Alice <alice@example.com>", size=100),
        "m2": _make_raw("m2", sender="Bob <bob@example.com>", size=250, date="Tue, 16 Jan 2024 08:00:00 +0000"),
        "m3": _make_raw("m3", sender="alice@example.com", size=50, to=["Me <me@example.com>, Other <other@example.com>"]),
    }


@pytest.fixture
def two_page_client(three_messages) -> _FakeMailboxClient:
    return _FakeMailboxClient(
        pages={None: (["m1", "m2"], "p2"), "p2": (["m3"], None)},
        messages=three_messages,
    )


@pytest.fixture
def token_header() -> str:
    token = {
        "access_token": "ya29.test-access-token",
        "token_type": "Bearer",
        "refresh_token": "1//refresh",
        "expiry": "2030-01-01T00:00:00Z",
    }
    return "Bearer " + json.dumps(token)
