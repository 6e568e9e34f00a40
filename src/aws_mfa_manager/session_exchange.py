"""Exchange long-term keys plus an MFA code for a temporary STS session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ._version import __version__
from .errors import ExchangeError

logger = logging.getLogger("aws-mfa-sts")

BOTO_CONFIG = Config(user_agent_extra=f"aws-mfa-manager/{__version__}")


@dataclass(frozen=True)
class SessionCredentials:
    access_key_id: str
    secret_access_key: str
    session_token: str
    expiration: datetime

    def missing_fields(self) -> List[str]:
        return [
            name
            for name in ("access_key_id", "secret_access_key", "session_token", "expiration")
            if not getattr(self, name)
        ]


class SessionExchanger(Protocol):
    def exchange(
        self,
        *,
        region: str,
        access_key_id: str,
        secret_access_key: str,
        serial_number: str,
        token_code: str,
        duration_seconds: int,
    ) -> SessionCredentials:
        ...


class StsSessionExchanger:
    """Calls ``sts:GetSessionToken`` with the given long-term keys."""

    def exchange(
        self,
        *,
        region: str,
        access_key_id: str,
        secret_access_key: str,
        serial_number: str,
        token_code: str,
        duration_seconds: int,
    ) -> SessionCredentials:
        if not region:
            raise ExchangeError("region is empty")
        if not access_key_id or not secret_access_key:
            raise ExchangeError("access key id and secret access key must be set")

        client = boto3.client(
            "sts",
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=BOTO_CONFIG,
        )
        logger.debug("Requesting session token in %s for %s", region, serial_number)
        try:
            response = client.get_session_token(
                DurationSeconds=duration_seconds,
                SerialNumber=serial_number,
                TokenCode=token_code,
            )
        except (BotoCoreError, ClientError) as exc:
            raise ExchangeError(f"sts get-session-token: {exc}") from exc

        creds = response.get("Credentials")
        if not creds:
            raise ExchangeError("sts get-session-token: no credentials in response")

        expiration = creds.get("Expiration")
        if isinstance(expiration, datetime):
            if expiration.tzinfo is None:
                expiration = expiration.replace(tzinfo=timezone.utc)
            expiration = expiration.astimezone(timezone.utc)
        return SessionCredentials(
            access_key_id=creds.get("AccessKeyId", ""),
            secret_access_key=creds.get("SecretAccessKey", ""),
            session_token=creds.get("SessionToken", ""),
            expiration=expiration,
        )
