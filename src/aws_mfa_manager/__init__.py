"""AWS MFA session refresh for the shared credentials file."""

from ._version import __version__
from .config_loader import Inputs, Resolved, resolve, resolve_region
from .credential_store import CredentialStore
from .decision import RefreshDecision, decide_refresh
from .errors import (
    ConfigError,
    ExchangeError,
    MfaError,
    MissingDeviceError,
    MissingKeyError,
    ParseError,
    StoreIOError,
    TokenFormatError,
)
from .refresher import CredentialRefresher, RefreshResult, refresh_once
from .sections import SectionNames, compute_section_names
from .session_exchange import SessionCredentials, StsSessionExchanger

__all__ = [
    "__version__",
    "Inputs",
    "Resolved",
    "resolve",
    "resolve_region",
    "CredentialStore",
    "RefreshDecision",
    "decide_refresh",
    "ConfigError",
    "ExchangeError",
    "MfaError",
    "MissingDeviceError",
    "MissingKeyError",
    "ParseError",
    "StoreIOError",
    "TokenFormatError",
    "CredentialRefresher",
    "RefreshResult",
    "refresh_once",
    "SectionNames",
    "compute_section_names",
    "SessionCredentials",
    "StsSessionExchanger",
]
