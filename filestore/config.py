"""Construction-time configuration for the local file store."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable

from .interfaces import ConfigurationError, PathLike

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_FILE_PERM = 0o644
DEFAULT_DIR_PERM = 0o755

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class LocalConfig:
    """Options controlling where and how a LocalFileStore writes.

    Attributes:
        root: Root directory. ``None`` means the directory returned by
            ``getcwd`` at construction time.
        file_perm: Permission bits applied to every stored file.
        dir_perm: Permission bits for directories created by inserts.
        durable: fsync file contents and the parent directory on insert.
        strict_paths: Reject ``..`` segments and drive-qualified paths.
        getcwd: Callable supplying the default root.

    """

    root: PathLike | None = None
    file_perm: int = DEFAULT_FILE_PERM
    dir_perm: int = DEFAULT_DIR_PERM
    durable: bool = True
    strict_paths: bool = False
    getcwd: Callable[[], str] = field(default=os.getcwd, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Validate permission bits eagerly."""
        _validate_mode("file_perm", self.file_perm)
        _validate_mode("dir_perm", self.dir_perm)

    def with_options(self, **changes: Any) -> LocalConfig:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_params(
        cls,
        root: PathLike | None,
        params: Mapping[str, str],
    ) -> LocalConfig:
        """Build a config from string parameters such as URI query values.

        Recognised keys are ``file_perm`` and ``dir_perm`` (octal strings,
        with or without a ``0o`` prefix) and ``durable`` / ``strict_paths``
        (boolean strings).

        Raises:
            ConfigurationError: If a key is unknown or a value cannot be parsed.

        """
        options: dict[str, Any] = {}
        for key, raw in params.items():
            if key in ("file_perm", "dir_perm"):
                options[key] = parse_mode(key, raw)
            elif key in ("durable", "strict_paths"):
                options[key] = parse_bool(key, raw)
            else:
                message = f"Unknown local store option: {key!r}"
                raise ConfigurationError(message)
        return cls(root=root or None, **options)


def parse_mode(name: str, raw: str) -> int:
    """Parse an octal permission string like ``"0640"`` or ``"0o640"``."""
    text = raw.strip().lower()
    if text.startswith("0o"):
        text = text[2:]
    try:
        value = int(text, 8)
    except ValueError as exc:
        raise ConfigurationError.invalid_mode(name, raw) from exc
    _validate_mode(name, value)
    return value


def parse_bool(name: str, raw: str) -> bool:
    """Parse a boolean option string."""
    text = raw.strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    message = f"Invalid boolean for {name}: {raw!r}"
    raise ConfigurationError(message)


def _validate_mode(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError.invalid_mode(name, value)
    if not 0 <= value <= 0o7777:
        raise ConfigurationError.invalid_mode(name, value)
