"""Authentication helpers for Gmail API."""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
from datetime import datetime, timezone

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from gmail_inbox_stats.constants import CONFIG_DIR, CREDENTIALS_PATH, IDENTITY_KEY_LENGTH, SCOPES, TOKEN_PATH
from gmail_inbox_stats.exceptions import CredentialInvalidError, CredentialMissingError

_BEARER_PREFIX = "Bearer "


def get_local_credentials() -> Credentials:
    """Return OAuth credentials for the local user.

    Loads cached token from TOKEN_PATH if available.  When the token is
    expired it is silently refreshed.  If no token exists, an OAuth
    browser flow is launched (requires credentials.json at
    CREDENTIALS_PATH).
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    creds: Credentials | None = None

    if TOKEN_PATH.exists():
        creds = Credentials.from_authorized_user_file(str(TOKEN_PATH), SCOPES)

    if creds and creds.expired and creds.refresh_token:
        creds.refresh(Request())
    elif not creds or not creds.valid:
        if not CREDENTIALS_PATH.exists():
            raise FileNotFoundError(
                f"Credentials file not found at {CREDENTIALS_PATH}.\n"
                "Download your OAuth client credentials from the Google Cloud Console "
                "and save them as:\n"
                f"  {CREDENTIALS_PATH}"
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(CREDENTIALS_PATH), SCOPES)
        creds = flow.run_local_server(port=0)

    TOKEN_PATH.write_text(creds.to_json())

    return creds


def _parse_expiry(value) -> datetime | None:
    """Parse an RFC 3339 expiry into the naive UTC datetime google-auth expects."""
    if not value:
        return None
    if not isinstance(value, str):
        raise CredentialInvalidError("invalid token format: expiry must be a string")
    try:
        expiry = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise CredentialInvalidError(f"invalid token format: bad expiry {value!r}") from exc
    if expiry.year <= 1:
        # zero value from clients that never set an expiry
        return None
    if expiry.tzinfo is not None:
        expiry = expiry.astimezone(timezone.utc).replace(tzinfo=None)
    return expiry


def _decode_token(token_str: str) -> dict:
    try:
        return json.loads(token_str)
    except json.JSONDecodeError:
        pass
    try:
        decoded = base64.b64decode(token_str, validate=True).decode("utf-8")
        return json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CredentialInvalidError("invalid token format: expected JSON or base64-encoded JSON") from exc


def parse_credential(authorization: str | None) -> Credentials:
    """Build credentials from an Authorization header value.

    The header carries the OAuth token as JSON (optionally base64-encoded),
    with or without a "Bearer " prefix. The returned credentials have no
    refresh endpoint: an expired token makes every API call fail instead of
    being refreshed here.
    """
    if authorization is None or not authorization.strip():
        raise CredentialMissingError("authorization header not provided")

    token_str = authorization.strip()
    if token_str.startswith(_BEARER_PREFIX):
        token_str = token_str[len(_BEARER_PREFIX) :].strip()

    data = _decode_token(token_str)
    if not isinstance(data, dict):
        raise CredentialInvalidError("invalid token format: expected a JSON object")

    access_token = data.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise CredentialInvalidError("invalid token format: missing access_token")

    return Credentials(
        token=access_token,
        refresh_token=data.get("refresh_token") or None,
        expiry=_parse_expiry(data.get("expiry")),
    )


def identity_key(credentials: Credentials) -> str:
    """Derive a stable registry key from the access token."""
    digest = hashlib.sha256(credentials.token.encode("utf-8")).hexdigest()
    return digest[:IDENTITY_KEY_LENGTH]
