"""Path-addressed file storage with crash-safe local writes.

This package exposes one interface for storing, retrieving and deleting files
identified by a path relative to a store root, plus a local filesystem
implementation whose inserts are atomic.

Core Components:
    - FileStore: Abstract interface all stores implement
    - LocalFileStore: Store rooted at a local directory
    - AsyncLocalFileStore: asyncio wrapper around LocalFileStore
    - Context: Cancellable operation context accepted by every operation

Quick Start:

    >>> from filestore import LocalFileStore
    >>> store = LocalFileStore(root="/data")
    >>> store.insert(None, b"Hello, world!", "greetings/hello.txt")
    >>> with store.get(None, "greetings/hello.txt") as fh:
    ...     fh.read()
    b'Hello, world!'

Exception Handling:

    >>> from filestore import NotFoundError
    >>> try:
    ...     store.get(None, "nonexistent.txt")
    ... except NotFoundError:
    ...     print("File not found")

Operations:
    - get() - Open an object for reading
    - insert() - Atomically store or replace an object
    - remove() - Delete an object
    - checksum() - Digest an object's content
    - close() - Release store resources

"""

from .async_interfaces import AsyncFileStore
from .async_local import AsyncLocalFileStore
from .config import LocalConfig
from .context import Context, background
from .factory import register_store_factory, resolve_store
from .interfaces import (
    DEFAULT_CHUNK_SIZE,
    ChecksumAlgorithm,
    ConfigurationError,
    File,
    FileStore,
    FileStoreError,
    InvalidPathError,
    NotFoundError,
    OperationCancelledError,
    PathLike,
    Source,
)
from .local import LocalFileStore

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "AsyncFileStore",
    "AsyncLocalFileStore",
    "ChecksumAlgorithm",
    "ConfigurationError",
    "Context",
    "File",
    "FileStore",
    "FileStoreError",
    "InvalidPathError",
    "LocalConfig",
    "LocalFileStore",
    "NotFoundError",
    "OperationCancelledError",
    "PathLike",
    "Source",
    "background",
    "register_store_factory",
    "resolve_store",
]
