"""Path normalisation and validation helpers.

Store paths are logical, slash-separated strings relative to the store root.
These helpers turn them into host paths and, for stores running in strict
mode, reject paths that could leave the root.

Key utilities:
- Windows separator normalisation
- Path traversal detection
- Root-relative joining with standard join semantics
"""

from __future__ import annotations

import ntpath
import os
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from .interfaces import InvalidPathError

if TYPE_CHECKING:
    from .interfaces import PathLike


def normalize_windows_path(path_str: str) -> str:
    """Normalize Windows backslashes to forward slashes.

    Example:

        >>> normalize_windows_path("dir\\subdir\\file.txt")
        'dir/subdir/file.txt'
        >>> normalize_windows_path("dir/subdir/file.txt")
        'dir/subdir/file.txt'

    """
    return path_str.replace("\\", "/")


def to_logical(path: PathLike) -> str:
    """Return ``path`` as a root-relative, slash-separated string.

    Leading slashes are dropped so that ``"/a/b"`` names the same object as
    ``"a/b"``, matching plain path-join semantics.

        >>> to_logical("/reports\\\\2024/q1.csv")
        'reports/2024/q1.csv'

    """
    return normalize_windows_path(os.fspath(path)).lstrip("/")


def detect_path_traversal_posix(path_parts: tuple[str, ...]) -> bool:
    """Detect path traversal attempts in path components.

    Example:

        >>> detect_path_traversal_posix(PurePosixPath("../../etc/passwd").parts)
        True
        >>> detect_path_traversal_posix(PurePosixPath("valid/relative/path").parts)
        False

    """
    return any(part == ".." for part in path_parts)


def validate_strict(path: PathLike) -> None:
    """Reject paths that are drive-qualified or contain ``..`` segments.

    Raises:
        InvalidPathError: If the path could resolve outside the store root.

    """
    logical = to_logical(path)
    if ntpath.splitdrive(logical)[0]:
        raise InvalidPathError.absolute_path_not_allowed(path)
    if detect_path_traversal_posix(PurePosixPath(logical).parts):
        raise InvalidPathError.path_outside_root(path)


def join_root(root: str, path: PathLike) -> str:
    """Join a logical path onto an absolute root and normalise the result.

    Redundant separators and ``.`` segments collapse; ``..`` segments are
    resolved lexically and are not checked against the root.

    Raises:
        InvalidPathError: If the path contains a NUL character.

    """
    logical = to_logical(path)
    if "\x00" in logical:
        raise InvalidPathError.null_byte(path)
    if not logical:
        return root
    return os.path.normpath(os.path.join(root, *logical.split("/")))
