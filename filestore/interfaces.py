"""Core interfaces and error types for file store implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Literal, Protocol, Union

if TYPE_CHECKING:
    from types import TracebackType

    from .context import Context

PathLike = Union[str, Path]
ChecksumAlgorithm = Literal["md5", "sha256", "sha512", "blake3"]
Source = Union[bytes, bytearray, str, BinaryIO, Iterable[Union[bytes, str]]]

DEFAULT_CHUNK_SIZE = 64 * 1024


class FileStoreError(RuntimeError):
    """Base exception for store operations."""

    def __init__(
        self,
        message: str,
        *,
        path: PathLike | None = None,
    ) -> None:
        """Initialise the base error with an optional path context."""
        path_obj = Path(path) if path is not None else None
        detail = message if path_obj is None else ": ".join((message, str(path_obj)))
        super().__init__(detail)
        self.message = message
        self.path = path_obj


class NotFoundError(FileStoreError):
    """Raised when no object exists at the requested path."""

    def __init__(self, path: PathLike) -> None:
        """Create a not-found error for the provided path."""
        super().__init__("File was not found", path=path)


class ConfigurationError(FileStoreError):
    """Raised when a store cannot be constructed from its configuration."""

    @classmethod
    def root_not_found(cls, path: PathLike) -> ConfigurationError:
        """Return an error for a root directory that does not exist."""
        return cls("Store root does not exist", path=path)

    @classmethod
    def root_not_directory(cls, path: PathLike) -> ConfigurationError:
        """Return an error for a root that is not a directory."""
        return cls("Store root is not a directory", path=path)

    @classmethod
    def root_unavailable(cls, reason: str) -> ConfigurationError:
        """Return an error when no root could be determined."""
        return cls(f"Couldn't set store root directory ({reason})")

    @classmethod
    def invalid_mode(cls, name: str, value: object) -> ConfigurationError:
        """Return an error for permission bits outside 0..0o7777."""
        return cls(f"Invalid {name}: {value!r}")


class InvalidPathError(FileStoreError):
    """Raised when a path is rejected before reaching the filesystem."""

    @classmethod
    def path_outside_root(cls, path: PathLike) -> InvalidPathError:
        """Return an error for a path that would escape the store root."""
        return cls("Path escapes store root", path=path)

    @classmethod
    def absolute_path_not_allowed(cls, path: PathLike) -> InvalidPathError:
        """Return an error for a drive-qualified path."""
        return cls("Path must be relative to the store root", path=path)

    @classmethod
    def null_byte(cls, path: PathLike) -> InvalidPathError:
        """Return an error for a path containing a NUL character."""
        return cls("Path contains a null byte", path=path)


class OperationCancelledError(FileStoreError):
    """Raised when an operation context was cancelled or timed out."""

    def __init__(self, reason: str = "Operation cancelled") -> None:
        """Create a cancellation error with a short reason."""
        super().__init__(reason)


class File(Protocol):
    """Read-only, sequential handle onto stored content.

    Handles are owned by the caller and must be closed exactly once, normally
    by using them in a ``with`` block.
    """

    def read(self, size: int = -1, /) -> bytes:
        """Read up to ``size`` bytes; ``b""`` signals end of stream."""
        ...

    def close(self) -> None:
        """Release the underlying descriptor."""
        ...

    def __enter__(self) -> File: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


class FileStore(ABC):
    """Standardised interface for path-addressed file stores.

    Paths are relative to the store root. Every operation accepts an operation
    context as its first argument; ``None`` behaves like a context that is
    never cancelled.
    """

    @abstractmethod
    def get(self, ctx: Context | None, path: PathLike) -> File:
        """Open the object at ``path`` for reading.

        Args:
            ctx: Operation context checked before any filesystem access.
            path: Object path relative to the store root.

        Returns:
            An open handle the caller must close.

        Raises:
            NotFoundError: If no regular file exists at ``path``.

        """

    @abstractmethod
    def insert(self, ctx: Context | None, source: Source, dest: PathLike) -> None:
        """Store the whole of ``source`` at ``dest``.

        Parent directories are created as needed. An existing object is
        replaced atomically; readers holding an open handle keep seeing the
        previous content.

        Args:
            ctx: Operation context.
            source: Byte stream, bytes, text or an iterable of chunks.
            dest: Destination path relative to the store root.

        """

    @abstractmethod
    def remove(self, ctx: Context | None, path: PathLike) -> None:
        """Permanently delete the object at ``path``.

        Raises:
            NotFoundError: If no object exists at ``path``.

        """

    @abstractmethod
    def close(self) -> None:
        """Free any resources held by the store."""

    def checksum(
        self,
        ctx: Context | None,
        path: PathLike,
        *,
        algorithm: ChecksumAlgorithm = "sha256",
    ) -> str:
        """Return the hex digest of the object at ``path``."""
        from .utils import compute_checksum_from_stream

        with self.get(ctx, path) as fh:
            return compute_checksum_from_stream(fh, algorithm=algorithm, ctx=ctx)

    def __enter__(self) -> FileStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
