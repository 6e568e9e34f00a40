"""Mapping of a profile to its long-term and short-term section names."""

from __future__ import annotations

from typing import NamedTuple

from .errors import ConfigError

NONE_SUFFIX = "none"


class SectionNames(NamedTuple):
    long_term: str
    short_term: str


def compute_section_names(
    profile: str, long_term_suffix: str, short_term_suffix: str
) -> SectionNames:
    """Return the storage sections for ``profile``.

    - long-term: ``<profile>-long-term`` when the suffix is empty,
      ``<profile>`` when it is ``none``, ``<profile>-<suffix>`` otherwise
    - short-term: ``<profile>`` when the suffix is empty or ``none``,
      ``<profile>-<suffix>`` otherwise
    """

    profile = (profile or "").strip()
    if not profile:
        raise ConfigError("profile is empty")

    long_term_suffix = (long_term_suffix or "").strip()
    short_term_suffix = (short_term_suffix or "").strip()

    if not long_term_suffix:
        long_name = f"{profile}-long-term"
    elif long_term_suffix.lower() == NONE_SUFFIX:
        long_name = profile
    else:
        long_name = f"{profile}-{long_term_suffix}"

    if not short_term_suffix or short_term_suffix.lower() == NONE_SUFFIX:
        short_name = profile
    else:
        short_name = f"{profile}-{short_term_suffix}"

    if long_name == short_name:
        raise ConfigError(
            f"long-term section name '{long_name}' equals short-term section name '{short_name}'"
        )
    return SectionNames(long_term=long_name, short_term=short_name)
