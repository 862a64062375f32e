"""Local filesystem implementation of FileStore.

Objects are regular files laid out under the store root exactly as their
logical paths describe them. Intermediate directories are created on insert
and left in place on remove.

Write Path:
    Inserts never write to the destination directly. Content is streamed into
    a uniquely named temporary file created in the destination's own
    directory, then moved over the destination with ``os.replace``. Keeping
    both files in one directory keeps them on one device, so the move is an
    atomic rename: readers see either the old object or the new one, and a
    handle opened before the rename keeps reading the old content. Any
    failure before the rename removes the temporary file.

Path Handling:
    Paths are joined onto the root with standard join semantics. ``..``
    segments are resolved lexically and are NOT checked against the root;
    callers are trusted to supply paths inside the namespace. Construct the
    store with ``strict_paths=True`` to reject traversal segments instead.

Example:

    >>> from filestore import LocalFileStore, NotFoundError
    >>> store = LocalFileStore(root="/data/files")
    >>> store.insert(None, b"Hello, world!", "docs/hello.txt")
    >>> with store.get(None, "docs/hello.txt") as fh:
    ...     fh.read()
    b'Hello, world!'
    >>> store.remove(None, "docs/hello.txt")

"""

from __future__ import annotations

import errno
import logging
import os
import stat
import tempfile
from typing import TYPE_CHECKING, Callable

from .config import DEFAULT_DIR_PERM, DEFAULT_FILE_PERM, LocalConfig
from .context import check
from .interfaces import (
    DEFAULT_CHUNK_SIZE,
    ConfigurationError,
    File,
    FileStore,
    NotFoundError,
    PathLike,
    Source,
)
from .path_utils import join_root, validate_strict
from .utils import iter_chunks

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".tmp_"

_NOT_FOUND_ERRORS = (FileNotFoundError, NotADirectoryError, IsADirectoryError)


class LocalFileStore(FileStore):
    """Store backed by a directory on the local filesystem."""

    def __init__(
        self,
        root: PathLike | None = None,
        *,
        file_perm: int = DEFAULT_FILE_PERM,
        dir_perm: int = DEFAULT_DIR_PERM,
        durable: bool = True,
        strict_paths: bool = False,
        getcwd: Callable[[], str] = os.getcwd,
    ) -> None:
        """Initialise the store rooted at ``root``.

        Args:
            root: Root directory. Defaults to the directory returned by
                ``getcwd``; relative roots are resolved against it too.
            file_perm: Permission bits given to stored files.
            dir_perm: Permission bits given to directories created on insert.
            durable: fsync file data and the parent directory on insert.
            strict_paths: Reject paths containing ``..`` segments.
            getcwd: Supplier of the working directory.

        Raises:
            ConfigurationError: If the root cannot be determined, does not
                exist or is not a directory.

        """
        self._config = LocalConfig(
            root=root,
            file_perm=file_perm,
            dir_perm=dir_perm,
            durable=durable,
            strict_paths=strict_paths,
            getcwd=getcwd,
        )
        self._root = _resolve_root(root, getcwd)
        self._closed = False

    @classmethod
    def from_config(cls, config: LocalConfig) -> LocalFileStore:
        """Create a store from a LocalConfig."""
        return cls(
            config.root,
            file_perm=config.file_perm,
            dir_perm=config.dir_perm,
            durable=config.durable,
            strict_paths=config.strict_paths,
            getcwd=config.getcwd,
        )

    @property
    def root(self) -> str:
        """Absolute path used as the store root."""
        return self._root

    @property
    def config(self) -> LocalConfig:
        """Configuration the store was built with."""
        return self._config

    def get(self, ctx: Context | None, path: PathLike) -> File:
        """Open the object at ``path`` for reading."""
        check(ctx)
        target = self._abs_path(path)
        try:
            fh = open(target, "rb")  # noqa: SIM115 - ownership passes to caller
        except _NOT_FOUND_ERRORS as exc:
            raise NotFoundError(path) from exc

        try:
            is_dir = stat.S_ISDIR(os.fstat(fh.fileno()).st_mode)
        except BaseException:
            fh.close()
            raise
        if is_dir:
            fh.close()
            raise NotFoundError(path)
        return fh

    def insert(self, ctx: Context | None, source: Source, dest: PathLike) -> None:
        """Atomically store ``source`` at ``dest``."""
        check(ctx)
        target = self._abs_path(dest)
        if target == self._root:
            raise IsADirectoryError(errno.EISDIR, "Cannot replace store root", target)
        parent = os.path.dirname(target)
        os.makedirs(parent, mode=self._config.dir_perm, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=parent)
        try:
            with open(fd, "wb", buffering=DEFAULT_CHUNK_SIZE) as tmp:
                os.chmod(tmp_path, self._config.file_perm)
                for chunk in iter_chunks(source):
                    check(ctx)
                    tmp.write(chunk)
                tmp.flush()
                if self._config.durable:
                    os.fsync(tmp.fileno())
            check(ctx)
            os.replace(tmp_path, target)
        except BaseException:
            _discard(tmp_path)
            raise

        if self._config.durable:
            # The object is already committed; a failed directory flush only
            # weakens durability of the rename.
            try:
                _fsync_directory(parent)
            except OSError:
                logger.warning("Could not fsync directory %s", parent, exc_info=True)
        logger.debug("Stored %s", target)

    def remove(self, ctx: Context | None, path: PathLike) -> None:
        """Delete the object at ``path``."""
        check(ctx)
        target = self._abs_path(path)
        try:
            os.remove(target)
        except _NOT_FOUND_ERRORS as exc:
            raise NotFoundError(path) from exc
        except PermissionError as exc:
            # Some platforms report EPERM/EACCES when unlinking a directory.
            if os.path.isdir(target):
                raise NotFoundError(path) from exc
            raise
        logger.debug("Removed %s", target)

    def close(self) -> None:
        """Release store resources. The local store holds none."""
        self._closed = True

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        return self._closed

    def _abs_path(self, path: PathLike) -> str:
        if self._config.strict_paths:
            validate_strict(path)
        return join_root(self._root, path)


def _resolve_root(root: PathLike | None, getcwd: Callable[[], str]) -> str:
    """Return the absolute root directory, validating that it exists."""
    base = os.fspath(root) if root is not None else ""
    if not base or not os.path.isabs(base):
        try:
            cwd = getcwd()
        except OSError as exc:
            raise ConfigurationError.root_unavailable(str(exc)) from exc
        base = os.path.join(cwd, base) if base else cwd
    resolved = os.path.normpath(base)

    try:
        st = os.stat(resolved)
    except FileNotFoundError as exc:
        raise ConfigurationError.root_not_found(resolved) from exc
    except OSError as exc:
        message = f"Cannot access store root ({exc.strerror or exc})"
        raise ConfigurationError(message, path=resolved) from exc
    if not stat.S_ISDIR(st.st_mode):
        raise ConfigurationError.root_not_directory(resolved)
    return resolved


def _discard(tmp_path: str) -> None:
    """Remove a temporary file left behind by a failed insert."""
    try:
        os.unlink(tmp_path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Could not remove temporary file %s", tmp_path, exc_info=True)


def _fsync_directory(path: str) -> None:
    """Flush a directory entry update to disk where the platform allows it."""
    if not hasattr(os, "O_DIRECTORY"):
        return
    fd = os.open(path, os.O_RDONLY | os.O_DIRECTORY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)
