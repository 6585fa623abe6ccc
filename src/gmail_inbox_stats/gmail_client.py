"""Gmail API client for listing and fetching messages."""

from __future__ import annotations

import threading
from typing import Protocol

import structlog
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from gmail_inbox_stats.constants import (
    INBOX_FIELDS,
    INBOX_LIST_SIZE,
    INBOX_QUERY,
    LIST_FIELDS,
    MESSAGE_FORMAT,
    PAGE_SIZE,
    RETRY_ATTEMPTS,
    RETRY_WAIT_MAX,
    RETRY_WAIT_MIN,
    RETRYABLE_STATUSES,
    USER_ID,
)
from gmail_inbox_stats.exceptions import ListingFetchError, MessageFetchError, MessageTrashError
from gmail_inbox_stats.extractor import message_from_api
from gmail_inbox_stats.models import MessagePage, RawMessage

logger = structlog.get_logger(__name__)


class MailboxClient(Protocol):
    """Mail-provider calls. Ingestion runs only use list_messages and get_message."""

    def list_messages(self, page_token: str | None = None, page_size: int = PAGE_SIZE) -> MessagePage: ...

    def get_message(self, message_id: str) -> RawMessage: ...

    def list_inbox(self, query: str = INBOX_QUERY, max_results: int = INBOX_LIST_SIZE) -> list[dict]: ...

    def trash_message(self, message_id: str) -> None: ...


def _is_retryable_http_error(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and exc.resp.status in RETRYABLE_STATUSES


_retry_transient = retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=RETRY_WAIT_MIN, max=RETRY_WAIT_MAX),
    stop=stop_after_attempt(RETRY_ATTEMPTS),
    reraise=True,
)


class GmailMailboxClient:
    """MailboxClient backed by the Gmail API.

    googleapiclient services wrap an httplib2.Http, which is not thread-safe,
    so one service is built lazily per calling thread.
    """

    def __init__(self, credentials: Credentials) -> None:
        self.credentials = credentials
        self._local = threading.local()

    def _service(self):
        service = getattr(self._local, "service", None)
        if service is None:
            service = build("gmail", "v1", credentials=self.credentials, cache_discovery=False)
            self._local.service = service
        return service

    @_retry_transient
    def _list(
        self,
        page_token: str | None,
        page_size: int,
        query: str | None = None,
        fields: str = LIST_FIELDS,
    ) -> dict:
        kwargs: dict = {"userId": USER_ID, "maxResults": page_size, "fields": fields}
        if query:
            kwargs["q"] = query
        if page_token:
            kwargs["pageToken"] = page_token
        return self._service().users().messages().list(**kwargs).execute()

    @_retry_transient
    def _get(self, message_id: str) -> dict:
        return (
            self._service()
            .users()
            .messages()
            .get(userId=USER_ID, id=message_id, format=MESSAGE_FORMAT)
            .execute()
        )

    @_retry_transient
    def _trash(self, message_id: str) -> dict:
        return self._service().users().messages().trash(userId=USER_ID, id=message_id).execute()

    def list_messages(self, page_token: str | None = None, page_size: int = PAGE_SIZE) -> MessagePage:
        """Fetch one page of message ids."""
        try:
            resp = self._list(page_token, page_size)
        except Exception as exc:  # noqa: BLE001
            raise ListingFetchError(f"Failed to fetch messages: {exc}") from exc

        ids = [m["id"] for m in resp.get("messages", []) if "id" in m]
        return MessagePage(ids=ids, next_page_token=resp.get("nextPageToken") or None)

    def get_message(self, message_id: str) -> RawMessage:
        """Fetch full detail for a single message."""
        try:
            resp = self._get(message_id)
        except Exception as exc:  # noqa: BLE001
            raise MessageFetchError(message_id, str(exc)) from exc
        return message_from_api(resp)

    def list_inbox(self, query: str = INBOX_QUERY, max_results: int = INBOX_LIST_SIZE) -> list[dict]:
        """Return id/threadId references for the newest messages matching query."""
        try:
            resp = self._list(None, max_results, query=query, fields=INBOX_FIELDS)
        except Exception as exc:  # noqa: BLE001
            raise ListingFetchError(f"Failed to fetch emails: {exc}") from exc

        return [
            {"id": m["id"], "threadId": m.get("threadId", "")}
            for m in resp.get("messages", [])
            if "id" in m
        ]

    def trash_message(self, message_id: str) -> None:
        """Move a message to trash."""
        try:
            self._trash(message_id)
        except Exception as exc:  # noqa: BLE001
            raise MessageTrashError(message_id, str(exc)) from exc


def get_profile_email(credentials: Credentials) -> str:
    """Return the address of the account the credentials belong to."""
    service = build("gmail", "v1", credentials=credentials, cache_discovery=False)
    profile = service.users().getProfile(userId=USER_ID).execute()
    logger.debug("gmail_profile_fetched", email=profile.get("emailAddress"))
    return profile["emailAddress"]
