"""Asynchronous interface for file store implementations.

This module mirrors FileStore with coroutine methods so stores can be used
from asyncio code without blocking the event loop.

Architecture:
    AsyncFileStore declares the same four operations as FileStore. Handles
    returned by ``get`` are the same synchronous File objects; reading them
    is the caller's concern.

    Implementations typically delegate to a synchronous store through
    ``asyncio.to_thread()``.

Example:

    >>> import asyncio
    >>> from filestore import AsyncLocalFileStore
    >>>
    >>> async def main():
    ...     store = AsyncLocalFileStore(root="/data/files")
    ...     await store.insert(None, b"Hello!", "greeting.txt")
    ...     fh = await store.get(None, "greeting.txt")
    ...     with fh:
    ...         print(fh.read())
    ...     await asyncio.gather(
    ...         store.insert(None, b"a", "a.txt"),
    ...         store.insert(None, b"b", "b.txt"),
    ...     )
    ...     await store.close()
    >>>
    >>> asyncio.run(main())

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .interfaces import ChecksumAlgorithm, File, PathLike, Source

if TYPE_CHECKING:
    from types import TracebackType

    from .context import Context


class AsyncFileStore(ABC):
    """Asynchronous interface for path-addressed file stores."""

    @abstractmethod
    async def get(self, ctx: Context | None, path: PathLike) -> File:
        """Open the object at ``path`` for reading asynchronously."""

    @abstractmethod
    async def insert(
        self,
        ctx: Context | None,
        source: Source,
        dest: PathLike,
    ) -> None:
        """Atomically store ``source`` at ``dest`` asynchronously."""

    @abstractmethod
    async def remove(self, ctx: Context | None, path: PathLike) -> None:
        """Delete the object at ``path`` asynchronously."""

    @abstractmethod
    async def close(self) -> None:
        """Free any resources held by the store."""

    @abstractmethod
    async def checksum(
        self,
        ctx: Context | None,
        path: PathLike,
        *,
        algorithm: ChecksumAlgorithm = "sha256",
    ) -> str:
        """Return the hex digest of the object at ``path``."""

    async def __aenter__(self) -> AsyncFileStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
