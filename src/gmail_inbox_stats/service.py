"""Request-facing operations over the processor registry.

Each operation takes the raw Authorization header value, resolves it to an
identity key and acts on that identity's processor or, for listing and
trashing, directly on its mailbox. Responses are plain JSON-ready dicts and
lists.
"""

from __future__ import annotations

from typing import Callable

import structlog
from google.oauth2.credentials import Credentials

from .auth import identity_key, parse_credential
from .constants import INBOX_LIST_SIZE, INBOX_QUERY, PAGE_SIZE, TOP_SENDERS_DEFAULT
from .exceptions import AlreadyRunningError, RunNotFoundError
from .gmail_client import GmailMailboxClient, MailboxClient
from .processor import InboxProcessor
from .registry import ProcessorRegistry

logger = structlog.get_logger(__name__)


class InboxStatsService:
    def __init__(
        self,
        registry: ProcessorRegistry | None = None,
        client_factory: Callable[[Credentials], MailboxClient] = GmailMailboxClient,
        page_size: int = PAGE_SIZE,
    ) -> None:
        self.registry = registry if registry is not None else ProcessorRegistry()
        self.client_factory = client_factory
        self.page_size = page_size

    def start(self, authorization: str | None) -> dict:
        """Start ingestion for the caller, or report the run already going."""
        credentials = parse_credential(authorization)
        key = identity_key(credentials)

        processor = self.registry.get_or_create(
            key,
            lambda: InboxProcessor(
                self.client_factory(credentials),
                identity_key=key,
                page_size=self.page_size,
            ),
        )
        try:
            processor.start()
        except AlreadyRunningError:
            logger.debug("inbox_run_already_running", identity=key)
        return processor.progress().to_dict()

    def status(self, authorization: str | None) -> dict:
        return self._lookup(authorization).progress().to_dict()

    def top_senders(self, authorization: str | None, n: int = TOP_SENDERS_DEFAULT) -> list[dict]:
        return [s.to_dict() for s in self._lookup(authorization).top_senders(n)]

    def stats(self, authorization: str | None) -> dict:
        return self._lookup(authorization).stats_snapshot().to_dict()

    def emails(self, authorization: str | None) -> list[dict]:
        """Metadata of every message the caller's runs have ingested so far."""
        return [e.to_dict() for e in self._lookup(authorization).emails()]

    def list_emails(
        self,
        authorization: str | None,
        max_results: int = INBOX_LIST_SIZE,
        query: str = INBOX_QUERY,
    ) -> list[dict]:
        """List the newest inbox messages directly from the provider.

        Needs no run; each call goes to the mailbox.
        """
        client = self.client_factory(parse_credential(authorization))
        return client.list_inbox(query=query, max_results=max_results)

    def trash_email(self, authorization: str | None, message_id: str) -> dict:
        """Move one message to the caller's trash."""
        credentials = parse_credential(authorization)
        self.client_factory(credentials).trash_message(message_id)
        logger.info("message_trashed", identity=identity_key(credentials), message_id=message_id)
        return {"status": "success", "message": "Email moved to trash"}

    def logout(self, authorization: str | None) -> bool:
        """Forget the caller's processor. Returns False if there was none."""
        credentials = parse_credential(authorization)
        return self.registry.remove(identity_key(credentials)) is not None

    def _lookup(self, authorization: str | None) -> InboxProcessor:
        credentials = parse_credential(authorization)
        key = identity_key(credentials)
        processor = self.registry.get(key)
        if processor is None:
            raise RunNotFoundError("No processing found for this user")
        return processor
