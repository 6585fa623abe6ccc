"""Inbox processor - pages through a mailbox and aggregates message metadata."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import wait as wait_all

import structlog

from .constants import PAGE_SIZE
from .exceptions import AlreadyRunningError
from .extractor import extract_metadata
from .gmail_client import MailboxClient
from .models import EmailMetadata, Progress, SenderSummary
from .stats import AggregateStatistics, StatsSnapshot

logger = structlog.get_logger(__name__)


class InboxProcessor:
    """Owns ingestion runs for one mailbox.

    A run lists the mailbox page by page. Every message id on a page is
    fetched and processed on a worker pool as wide as the page, and the next
    page is only requested once all of the current page's work has finished.
    A later run on the same processor lists the mailbox again but only
    fetches messages it has not ingested yet, so each message is counted once.
    """

    def __init__(
        self,
        client: MailboxClient,
        identity_key: str = "",
        page_size: int = PAGE_SIZE,
        stats: AggregateStatistics | None = None,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.client = client
        self.identity_key = identity_key
        self.page_size = page_size
        self.stats = stats if stats is not None else AggregateStatistics()

        self._lock = threading.Lock()
        self._emails: list[EmailMetadata] = []
        self._seen: set[str] = set()
        self._running = False
        self._page_token: str | None = None
        self._failed = 0
        self._pages = 0
        self._error: str | None = None
        self._cancel = threading.Event()
        self._thread: threading.Thread | None = None
        self._log = logger.bind(identity=identity_key)

    # --- public API ---

    def start(self) -> None:
        """Launch a background run and return immediately.

        Raises AlreadyRunningError if a run is in progress.
        """
        with self._lock:
            if self._running:
                raise AlreadyRunningError("processing already in progress")
            self._running = True
            self._page_token = None
            self._failed = 0
            self._pages = 0
            self._error = None
            self._cancel.clear()
            self._thread = threading.Thread(
                target=self._run,
                name=f"inbox-{self.identity_key or 'run'}",
                daemon=True,
            )
            thread = self._thread
        thread.start()

    def cancel(self) -> None:
        """Ask the current run to stop.

        Checked between pages and before each message is fetched; calls
        already in flight are allowed to finish. No-op when idle.
        """
        with self._lock:
            if self._running:
                self._cancel.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the current run ends. Returns False on timeout."""
        with self._lock:
            thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return not self.is_running

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def progress(self) -> Progress:
        total = self.stats.total
        with self._lock:
            return Progress(
                total_processed=total,
                is_running=self._running,
                failed=self._failed,
                pages=self._pages,
                cancelled=self._cancel.is_set(),
                error=self._error,
            )

    def top_senders(self, n: int) -> list[SenderSummary]:
        return self.stats.top_senders(n)

    def stats_snapshot(self) -> StatsSnapshot:
        return self.stats.snapshot()

    def emails(self) -> list[EmailMetadata]:
        with self._lock:
            return list(self._emails)

    # --- ingestion ---

    def _run(self) -> None:
        page_token: str | None = None
        try:
            self._log.info("inbox_run_started", page_size=self.page_size)
            with ThreadPoolExecutor(
                max_workers=self.page_size,
                thread_name_prefix=f"inbox-{self.identity_key or 'run'}-msg",
            ) as pool:
                while not self._cancel.is_set():
                    try:
                        page = self.client.list_messages(page_token, self.page_size)
                    except Exception as exc:  # noqa: BLE001
                        self._log.error("message_listing_failed", page=self._pages + 1, error=str(exc))
                        with self._lock:
                            self._error = str(exc)
                        break

                    futures = [pool.submit(self._process_message, message_id) for message_id in page.ids]
                    wait_all(futures)

                    with self._lock:
                        self._pages += 1
                        self._page_token = page.next_page_token
                        pages = self._pages
                    self._log.debug("inbox_page_processed", page=pages, messages=len(page.ids))

                    if not page.next_page_token:
                        break
                    page_token = page.next_page_token
        finally:
            with self._lock:
                self._running = False
                failed = self._failed
                pages = self._pages
            if self._cancel.is_set():
                self._log.info("inbox_run_cancelled", total=self.stats.total, failed=failed, pages=pages)
            else:
                self._log.info("inbox_run_finished", total=self.stats.total, failed=failed, pages=pages)

    def _process_message(self, message_id: str) -> None:
        if self._cancel.is_set():
            return
        with self._lock:
            # claimed before fetching so a message is ingested at most once
            if message_id in self._seen:
                return
            self._seen.add(message_id)

        try:
            raw = self.client.get_message(message_id)
        except Exception as exc:  # noqa: BLE001
            self._log.warning("message_fetch_failed", message_id=message_id, error=str(exc))
            self._release(message_id)
            return

        try:
            metadata = extract_metadata(raw)
            self.stats.record(metadata)
        except Exception:  # noqa: BLE001
            self._log.exception("message_processing_failed", message_id=message_id)
            self._release(message_id)
            return

        with self._lock:
            self._emails.append(metadata)

    def _release(self, message_id: str) -> None:
        """Count a failed message and let a later run retry it."""
        with self._lock:
            self._seen.discard(message_id)
            self._failed += 1
