"""Custom exceptions for Gmail Inbox Stats."""


class InboxStatsError(Exception):
    """Base exception for all Gmail Inbox Stats errors."""


class AuthorizationError(InboxStatsError):
    """Exception raised when a request carries no usable credential."""


class CredentialMissingError(AuthorizationError):
    """Exception raised when no credential was supplied."""


class CredentialInvalidError(AuthorizationError):
    """Exception raised when the supplied credential cannot be parsed."""


class AlreadyRunningError(InboxStatsError):
    """Exception raised when starting a processor that is already running."""


class RunNotFoundError(InboxStatsError):
    """Exception raised when no run was ever started for an identity."""


class MessageFetchError(InboxStatsError):
    """Exception raised when fetching a single message fails."""

    def __init__(self, message_id: str, reason: str) -> None:
        super().__init__(f"Failed to fetch message {message_id}: {reason}")
        self.message_id = message_id


class ListingFetchError(InboxStatsError):
    """Exception raised when listing a page of messages fails."""


class MessageTrashError(InboxStatsError):
    """Exception raised when moving a message to trash fails."""

    def __init__(self, message_id: str, reason: str) -> None:
        super().__init__(f"Failed to delete email {message_id}: {reason}")
        self.message_id = message_id
