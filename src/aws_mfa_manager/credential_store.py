"""Thin wrapper over an AWS shared credentials file for read + atomic write."""

from __future__ import annotations

import configparser
import io
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .errors import ConfigError, MissingKeyError, ParseError, StoreIOError

logger = logging.getLogger("aws-mfa-store")

DEFAULT_FILE_MODE = 0o600
DEFAULT_DIR_MODE = 0o700
TEMP_PREFIX = "aws-mfa-credentials-"
TEMP_SUFFIX = ".tmp"
COMMENT_PREFIXES = ("#", ";")

# AWS files use [default] as an ordinary profile; keep configparser's
# inherited-defaults section out of the way.
_INHERITED_DEFAULTS = "__inherited_defaults__"


def _new_parser() -> configparser.ConfigParser:
    # Secrets may contain '%', so interpolation stays off. Keys are folded
    # to lower case by configparser, section names are not. A repeated key
    # keeps its last value.
    return configparser.ConfigParser(
        interpolation=None, default_section=_INHERITED_DEFAULTS, strict=False
    )


class _Comments:
    """Comment lines of a credentials file, attached to what follows them."""

    def __init__(self) -> None:
        self.sections: Dict[str, List[str]] = {}
        self.keys: Dict[Tuple[str, str], List[str]] = {}
        self.trailing: List[str] = []

    @classmethod
    def scan(cls, text: str, optionxform) -> "_Comments":
        comments = cls()
        pending: List[str] = []
        section: Optional[str] = None
        for raw in text.splitlines():
            line = raw.strip()
            if line.startswith(COMMENT_PREFIXES):
                pending.append(line)
            elif not line or raw[:1].isspace():
                continue
            elif line.startswith("[") and "]" in line:
                section = line[1 : line.rindex("]")]
                comments.sections.setdefault(section, []).extend(pending)
                pending = []
            elif section is not None and pending:
                key = optionxform(_split_key(line))
                comments.keys.setdefault((section, key), []).extend(pending)
                pending = []
        comments.trailing = pending
        return comments


def _split_key(line: str) -> str:
    cut = min((line.index(d) for d in ("=", ":") if d in line), default=len(line))
    return line[:cut].strip()


class CredentialStore:
    """Sections of key/value pairs backed by a single INI file."""

    def __init__(
        self,
        path: Union[str, Path],
        parser: Optional[configparser.ConfigParser] = None,
        comments: Optional[_Comments] = None,
    ) -> None:
        if not str(path).strip():
            raise ConfigError("credentials file path is empty")
        self._path = Path(path)
        self._parser = parser if parser is not None else _new_parser()
        self._comments = comments if comments is not None else _Comments()

    @classmethod
    def load(cls, path: Union[str, Path]) -> "CredentialStore":
        """Read ``path``; a missing file yields an empty store bound to it."""

        if not str(path).strip():
            raise ConfigError("credentials file path is empty")
        path = Path(path)
        parser = _new_parser()
        try:
            text = path.read_text(encoding="utf-8-sig")
        except FileNotFoundError:
            logger.debug("Credentials file %s not found; starting empty", path)
            return cls(path, parser)
        except OSError as exc:
            raise StoreIOError(f"read credentials file {path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ParseError(f"decode credentials file {path}: {exc}") from exc

        try:
            parser.read_string(text, source=str(path))
        except configparser.Error as exc:
            raise ParseError(f"parse credentials file {path}: {exc}") from exc
        logger.debug("Loaded %d section(s) from %s", len(parser.sections()), path)
        return cls(path, parser, _Comments.scan(text, parser.optionxform))

    @property
    def path(self) -> Path:
        return self._path

    def sections(self) -> List[str]:
        return self._parser.sections()

    def has_section(self, name: str) -> bool:
        return self._parser.has_section(name)

    def items(self, section: str) -> Dict[str, str]:
        if not self._parser.has_section(section):
            return {}
        return {key: value.strip() for key, value in self._parser.items(section)}

    def ensure_section(self, name: str) -> None:
        if not self._parser.has_section(name):
            self._parser.add_section(name)

    def get(self, section: str, key: str) -> Optional[str]:
        """Return the trimmed value, or ``None`` when section or key is absent."""

        if not self._parser.has_option(section, key):
            return None
        return self._parser.get(section, key).strip()

    def must_get(self, section: str, key: str) -> str:
        value = self.get(section, key)
        if not value:
            raise MissingKeyError(section, key)
        return value

    def set(self, section: str, key: str, value: str) -> None:
        self.ensure_section(section)
        self._parser.set(section, key, value)

    def delete_key(self, section: str, key: str) -> None:
        if self._parser.has_section(section):
            self._parser.remove_option(section, key)

    def serialize(self) -> str:
        """Render the INI text, putting comment lines back above what they preceded."""

        buffer = io.StringIO()
        for section in self._parser.sections():
            for comment in self._comments.sections.get(section, ()):
                buffer.write(f"{comment}\n")
            buffer.write(f"[{section}]\n")
            for key, value in self._parser.items(section):
                for comment in self._comments.keys.get((section, key), ()):
                    buffer.write(f"{comment}\n")
                value = str(value).replace("\n", "\n\t")
                buffer.write(f"{key} = {value}\n")
            buffer.write("\n")
        for comment in self._comments.trailing:
            buffer.write(f"{comment}\n")
        return buffer.getvalue()

    def save_atomic(self) -> None:
        """Replace the backing file in one rename.

        The content goes to a temp file in the target's directory first, so a
        failure at any point leaves the previous file (or its absence) as is.
        """

        target = self._path
        directory = target.parent
        try:
            directory.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreIOError(f"ensure credentials dir {directory}: {exc}") from exc

        try:
            mode = stat.S_IMODE(target.stat().st_mode)
        except FileNotFoundError:
            mode = DEFAULT_FILE_MODE
        except OSError as exc:
            raise StoreIOError(f"stat credentials file {target}: {exc}") from exc

        payload = self.serialize()
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX, dir=directory)
        except OSError as exc:
            raise StoreIOError(f"create temp credentials file in {directory}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                os.chmod(tmp_name, mode)
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, target)
        except OSError as exc:
            self._discard_temp(tmp_name)
            raise StoreIOError(f"replace credentials file {target}: {exc}") from exc
        except BaseException:
            self._discard_temp(tmp_name)
            raise
        logger.debug("Saved %d section(s) to %s", len(self._parser.sections()), target)

    @staticmethod
    def _discard_temp(tmp_name: str) -> None:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        except OSError as exc:  # cleanup only; the caller re-raises
            logger.warning("Could not remove temp file %s: %s", tmp_name, exc)
