from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional

from .config_loader import Inputs, Resolved, expand_home, os_environment, resolve, resolve_region
from .credential_store import CredentialStore
from .decision import (
    REASON_EXPIRED,
    REASON_SECTION_MISSING,
    RefreshDecision,
    decide_refresh,
    format_expiration,
)
from .errors import ExchangeError, MissingKeyError
from .session_exchange import SessionCredentials, SessionExchanger, StsSessionExchanger
from .token_input import TokenPrompt, prompt_token, validate_token

logger = logging.getLogger("aws-mfa-refresher")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RefreshResult:
    resolved: Resolved
    decision: RefreshDecision
    credentials: Optional[SessionCredentials] = None

    @property
    def refreshed(self) -> bool:
        return self.credentials is not None


class CredentialRefresher:
    """Loads the credentials file and renews the short-term section when needed."""

    def __init__(
        self,
        *,
        env: Optional[Mapping[str, str]] = None,
        exchanger: Optional[SessionExchanger] = None,
        clock: Callable[[], datetime] = _utcnow,
        token_prompt: TokenPrompt = prompt_token,
    ) -> None:
        self._env = env if env is not None else os_environment()
        self._exchanger = exchanger if exchanger is not None else StsSessionExchanger()
        self._clock = clock
        self._token_prompt = token_prompt

    def refresh_once(self, inputs: Inputs, *, region: Optional[str] = None) -> RefreshResult:
        store = CredentialStore.load(expand_home(inputs.credentials_file))
        resolved = resolve(inputs, self._env, store)
        logger.info("Using profile: %s", resolved.short_term_section)

        long_term = resolved.long_term_section
        try:
            access_key_id = store.must_get(long_term, "aws_access_key_id")
            secret_access_key = store.must_get(long_term, "aws_secret_access_key")
        except MissingKeyError as exc:
            logger.error("Long-term section [%s] is missing %s", long_term, exc.key)
            raise

        decision = decide_refresh(self._clock(), store, resolved.short_term_section, resolved.force)
        if not decision.should_refresh:
            self._log_still_valid(decision)
            return RefreshResult(resolved=resolved, decision=decision)

        self._log_refresh_reason(decision, resolved.short_term_section)

        token = resolved.token or self._token_prompt(resolved.device, resolved.duration_seconds)
        token = validate_token(token)

        credentials = self._exchanger.exchange(
            region=resolve_region(region, self._env),
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            serial_number=resolved.device,
            token_code=token,
            duration_seconds=resolved.duration_seconds,
        )
        missing = credentials.missing_fields()
        if missing:
            raise ExchangeError(f"session exchange returned incomplete data: missing {', '.join(missing)}")

        write_short_term(store, resolved.short_term_section, credentials)
        store.save_atomic()

        logger.info(
            "Success! Your credentials will expire in %d seconds at: %s",
            resolved.duration_seconds,
            credentials.expiration.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
        )
        return RefreshResult(resolved=resolved, decision=decision, credentials=credentials)

    @staticmethod
    def _log_still_valid(decision: RefreshDecision) -> None:
        if decision.remaining is not None and decision.expires_at is not None:
            logger.info(
                "Your credentials are still valid for %.0f seconds they will expire at %s",
                decision.remaining.total_seconds(),
                format_expiration(decision.expires_at),
            )
            return
        logger.info("Your credentials are still valid.")

    @staticmethod
    def _log_refresh_reason(decision: RefreshDecision, short_term_section: str) -> None:
        if decision.reason == REASON_EXPIRED:
            logger.info("Your credentials have expired, renewing.")
        elif decision.reason == REASON_SECTION_MISSING:
            logger.info(
                "Short term credentials section [%s] is missing, obtaining new credentials.",
                short_term_section,
            )
        else:
            logger.info("Obtaining new credentials (%s).", decision.reason)


def write_short_term(store: CredentialStore, section: str, credentials: SessionCredentials) -> None:
    """Rewrite ``section`` with a fresh session; both token keys get the same value."""

    store.set(section, "aws_access_key_id", credentials.access_key_id)
    store.set(section, "aws_secret_access_key", credentials.secret_access_key)
    store.set(section, "aws_session_token", credentials.session_token)
    store.set(section, "aws_security_token", credentials.session_token)
    store.set(section, "expiration", format_expiration(credentials.expiration))
    store.set(section, "assumed_role", "False")
    store.delete_key(section, "assumed_role_arn")


def refresh_once(
    inputs: Inputs,
    *,
    region: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    exchanger: Optional[SessionExchanger] = None,
) -> RefreshResult:
    refresher = CredentialRefresher(env=env, exchanger=exchanger)
    return refresher.refresh_once(inputs, region=region)
