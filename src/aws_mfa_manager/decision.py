"""Decide whether the short-term credentials need to be refreshed."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .credential_store import CredentialStore
from .errors import ParseError

EXPIRATION_FORMAT = "%Y-%m-%d %H:%M:%S"

SHORT_TERM_REQUIRED_KEYS = (
    "aws_access_key_id",
    "aws_secret_access_key",
    "aws_session_token",
    "aws_security_token",
    "expiration",
)

REASON_FORCED = "forced"
REASON_SECTION_MISSING = "section-missing"
REASON_KEYS_MISSING = "keys-missing"
REASON_INVALID_EXPIRY = "invalid-expiry"
REASON_EXPIRED = "expired"
REASON_STILL_VALID = "still-valid"


@dataclass(frozen=True)
class RefreshDecision:
    should_refresh: bool
    reason: str
    # Only set when the stored expiration parsed.
    expires_at: Optional[datetime] = None
    remaining: Optional[timedelta] = None


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_expiration(value: str) -> datetime:
    """Parse a stored ``YYYY-MM-DD HH:MM:SS`` value as a UTC instant."""

    try:
        parsed = datetime.strptime(value, EXPIRATION_FORMAT)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"parse expiration '{value}': {exc}") from exc
    return parsed.replace(tzinfo=timezone.utc)


def format_expiration(moment: datetime) -> str:
    return _as_utc(moment).strftime(EXPIRATION_FORMAT)


def decide_refresh(
    now: datetime, store: CredentialStore, short_term_section: str, force: bool
) -> RefreshDecision:
    """Walk the checks in order; the first one that matches decides.

    An unreadable expiration asks for a refresh rather than raising.
    """

    if force:
        return RefreshDecision(should_refresh=True, reason=REASON_FORCED)

    if not store.has_section(short_term_section):
        return RefreshDecision(should_refresh=True, reason=REASON_SECTION_MISSING)

    for key in SHORT_TERM_REQUIRED_KEYS:
        if not store.get(short_term_section, key):
            return RefreshDecision(should_refresh=True, reason=REASON_KEYS_MISSING)

    try:
        expires_at = parse_expiration(store.get(short_term_section, "expiration"))
    except ParseError:
        return RefreshDecision(should_refresh=True, reason=REASON_INVALID_EXPIRY)

    remaining = expires_at - _as_utc(now)
    if remaining <= timedelta(0):
        return RefreshDecision(
            should_refresh=True,
            reason=REASON_EXPIRED,
            expires_at=expires_at,
            remaining=remaining,
        )
    return RefreshDecision(
        should_refresh=False,
        reason=REASON_STILL_VALID,
        expires_at=expires_at,
        remaining=remaining,
    )
