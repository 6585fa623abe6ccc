"""Constants for Gmail Inbox Stats."""

from pathlib import Path

# --- Config paths ---
CONFIG_DIR = Path.home() / ".gmail-inbox-stats"
CREDENTIALS_PATH = CONFIG_DIR / "credentials.json"
TOKEN_PATH = CONFIG_DIR / "token.json"

# --- Gmail API ---
SCOPES = ["https://www.googleapis.com/auth/gmail.modify"]  # read for scans, trash for cleanup
USER_ID = "me"  # the authenticated user
PAGE_SIZE = 100  # message ids per list page, also the per-page fan-out width
MESSAGE_FORMAT = "full"
LIST_FIELDS = "messages/id,nextPageToken"
INBOX_FIELDS = "messages(id,threadId),resultSizeEstimate"
INBOX_QUERY = "in:inbox"
INBOX_LIST_SIZE = 10

# --- Retry ---
RETRY_ATTEMPTS = 5
RETRY_WAIT_MIN = 1
RETRY_WAIT_MAX = 60
RETRYABLE_STATUSES = (429, 500, 503)

# --- Registry ---
REGISTRY_TTL_SECONDS = 3600  # idle runs are evicted after this long without access

# --- Statistics ---
DATE_KEY_FORMAT = "%Y-%m-%d"
TOP_SENDERS_DEFAULT = 20

# --- Headers ---
HEADER_FROM = "from"
HEADER_TO = "to"
HEADER_SUBJECT = "subject"
HEADER_DATE = "date"

# Non-conforming Date header layouts, tried after the RFC 2822 parser.
DATE_FORMATS = [
    "%a, %d %b %Y %H:%M:%S %z",
    "%a, %d %b %Y %H:%M:%S %Z",
    "%d %b %Y %H:%M:%S %z",
    "%d %b %Y %H:%M:%S %Z",
    "%a, %d %b %Y %H:%M %z",
    "%a, %d %b %y %H:%M:%S %z",
    "%a %d %b %Y %H:%M:%S %z",
    "%a, %d %b %Y %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S %z",
]

# --- CLI ---
POLL_INTERVAL_SECONDS = 0.5
IDENTITY_KEY_LENGTH = 16
