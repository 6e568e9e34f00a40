from __future__ import annotations

import re
from typing import Callable

from .errors import TokenFormatError

TOKEN_PATTERN = re.compile(r"^\d{6}$")

TokenPrompt = Callable[[str, int], str]


def validate_token(token: str) -> str:
    token = (token or "").strip()
    if not TOKEN_PATTERN.match(token):
        raise TokenFormatError("token must be six digits")
    return token


def prompt_token(device: str, duration_seconds: int) -> str:
    """Interactive prompt for the MFA code."""

    try:
        return input(
            f"Enter AWS MFA code for device [{device}] (renewing for {duration_seconds} seconds): "
        ).strip()
    except EOFError:
        return ""
