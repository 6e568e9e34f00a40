"""Resolve the effective configuration for one refresh run.

Each value is taken from the first source that has it: an explicit input,
the environment, the long-term credentials section, then a built-in default.
The environment is passed in as a mapping so nothing here reads process
state on its own.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .credential_store import CredentialStore
from .errors import ConfigError, MissingDeviceError
from .sections import compute_section_names

logger = logging.getLogger("aws-mfa-config")

DEFAULT_CREDENTIALS_FILE = "~/.aws/credentials"
DEFAULT_PROFILE = "default"
DEFAULT_LONG_TERM_SUFFIX = "long-term"
DEFAULT_SHORT_TERM_SUFFIX = "none"
DEFAULT_DURATION_SECONDS = 43200  # 12 hours, the STS maximum without assume-role
DEFAULT_REGION = "us-east-1"

PROFILE_ENV = "AWS_PROFILE"
DEVICE_ENV = "MFA_DEVICE"
DURATION_ENV = "MFA_STS_DURATION"
REGION_ENVS = ("AWS_REGION", "AWS_DEFAULT_REGION")
DEVICE_KEY = "aws_mfa_device"


@dataclass(frozen=True)
class Inputs:
    """Values handed over by the caller; ``None`` means "not provided"."""

    profile: Optional[str] = None
    device: Optional[str] = None
    duration_seconds: Optional[int] = None
    token: Optional[str] = None
    force: bool = False
    long_term_suffix: str = DEFAULT_LONG_TERM_SUFFIX
    short_term_suffix: str = DEFAULT_SHORT_TERM_SUFFIX
    credentials_file: str = DEFAULT_CREDENTIALS_FILE


@dataclass(frozen=True)
class Resolved:
    profile: str
    long_term_section: str
    short_term_section: str
    device: str
    duration_seconds: int
    token: str
    force: bool
    credentials_file: str


def expand_home(path: str) -> str:
    """Expand a leading ``~`` or ``~/`` to the current user's home directory."""

    path = (path or "").strip()
    if path == "~" or path.startswith("~/"):
        try:
            home = Path.home()
        except RuntimeError:
            return path
        return str(home) if path == "~" else str(home / path[2:])
    return path


def load_env_file(path: Optional[str]) -> bool:
    """Load a dotenv file into the process environment without overriding it."""

    if not path:
        return False
    env_path = Path(expand_home(path))
    if not env_path.is_file():
        raise ConfigError(f"env file not found: {env_path}")
    loaded = load_dotenv(env_path, override=False)
    logger.debug("Loaded env file %s", env_path)
    return loaded


def _explicit(value: Optional[str]) -> str:
    return value.strip() if value is not None else ""


def _env(env: Mapping[str, str], key: str) -> str:
    return (env.get(key) or "").strip()


def _resolve_duration(explicit: Optional[int], env: Mapping[str, str]) -> int:
    if explicit is not None and explicit > 0:
        return int(explicit)

    raw = _env(env, DURATION_ENV)
    if not raw:
        return DEFAULT_DURATION_SECONDS
    try:
        parsed = int(raw)
    except ValueError as exc:
        raise ConfigError(f"invalid {DURATION_ENV} '{raw}'") from exc
    if parsed <= 0:
        raise ConfigError(f"invalid {DURATION_ENV} '{raw}'")
    return parsed


def resolve(inputs: Inputs, env: Mapping[str, str], store: CredentialStore) -> Resolved:
    profile = _explicit(inputs.profile) or _env(env, PROFILE_ENV) or DEFAULT_PROFILE
    names = compute_section_names(profile, inputs.long_term_suffix, inputs.short_term_suffix)

    device = (
        _explicit(inputs.device)
        or _env(env, DEVICE_ENV)
        or (store.get(names.long_term, DEVICE_KEY) or "")
    )
    if not device:
        raise MissingDeviceError(
            f"missing MFA device: set --device, {DEVICE_ENV}, or {DEVICE_KEY} "
            f"in the [{names.long_term}] section"
        )

    return Resolved(
        profile=profile,
        long_term_section=names.long_term,
        short_term_section=names.short_term,
        device=device,
        duration_seconds=_resolve_duration(inputs.duration_seconds, env),
        token=_explicit(inputs.token),
        force=inputs.force,
        credentials_file=expand_home(inputs.credentials_file),
    )


def resolve_region(explicit: Optional[str], env: Mapping[str, str]) -> str:
    region = _explicit(explicit)
    if region:
        return region
    for key in REGION_ENVS:
        region = _env(env, key)
        if region:
            return region
    return DEFAULT_REGION


def os_environment() -> Mapping[str, str]:
    return os.environ
