"""Exception types raised by the credential lifecycle."""

from __future__ import annotations


class MfaError(RuntimeError):
    """Base class for every failure the refresh flow reports to its caller."""


class ConfigError(MfaError):
    """Bad or contradictory configuration (empty profile, bad duration, ...)."""


class MissingDeviceError(ConfigError):
    """The MFA device could not be resolved from flags, env or the store."""


class MissingKeyError(MfaError):
    def __init__(self, section: str, key: str) -> None:
        super().__init__(f"missing '{key}' in [{section}]")
        self.section = section
        self.key = key


class ParseError(MfaError):
    """The credentials file (or a value inside it) could not be parsed."""


class StoreIOError(MfaError):
    """Filesystem failure while reading or writing the credentials file."""


class ExchangeError(MfaError):
    """The STS session exchange failed or returned incomplete data."""


class TokenFormatError(MfaError):
    pass
