"""Asynchronous local filesystem store.

Each operation runs the matching LocalFileStore call in a worker thread via
``asyncio.to_thread()``. Cancelling the awaiting task stops waiting straight
away; the worker finishes its current call, and an interrupted insert still
cleans up its temporary file or commits in full.

Example:

    >>> import asyncio
    >>> from filestore import AsyncLocalFileStore
    >>>
    >>> async def main():
    ...     store = AsyncLocalFileStore(root="/data")
    ...     await store.insert(None, b"Hello!", "file.txt")
    ...     print(await store.checksum(None, "file.txt"))
    ...     await store.remove(None, "file.txt")
    >>>
    >>> asyncio.run(main())

"""

from __future__ import annotations

import asyncio
import os
from typing import TYPE_CHECKING, Callable

from .async_interfaces import AsyncFileStore
from .config import DEFAULT_DIR_PERM, DEFAULT_FILE_PERM
from .interfaces import ChecksumAlgorithm, File, PathLike, Source
from .local import LocalFileStore

if TYPE_CHECKING:
    from .config import LocalConfig
    from .context import Context


class AsyncLocalFileStore(AsyncFileStore):
    """Asynchronous wrapper around LocalFileStore."""

    def __init__(
        self,
        root: PathLike | None = None,
        *,
        file_perm: int = DEFAULT_FILE_PERM,
        dir_perm: int = DEFAULT_DIR_PERM,
        durable: bool = True,
        strict_paths: bool = False,
        getcwd: Callable[[], str] = os.getcwd,
        sync_store: LocalFileStore | None = None,
    ) -> None:
        """Initialise the async store with the same options as LocalFileStore.

        Passing ``sync_store`` wraps an existing store and ignores the other
        options.
        """
        if sync_store is not None:
            self._sync_store = sync_store
            return
        self._sync_store = LocalFileStore(
            root,
            file_perm=file_perm,
            dir_perm=dir_perm,
            durable=durable,
            strict_paths=strict_paths,
            getcwd=getcwd,
        )

    @classmethod
    def from_config(cls, config: LocalConfig) -> AsyncLocalFileStore:
        """Create an async store from a LocalConfig."""
        return cls(sync_store=LocalFileStore.from_config(config))

    @property
    def root(self) -> str:
        """Absolute path used as the store root."""
        return self._sync_store.root

    @property
    def sync_store(self) -> LocalFileStore:
        """The wrapped synchronous store."""
        return self._sync_store

    async def get(self, ctx: Context | None, path: PathLike) -> File:
        """Open the object at ``path`` for reading.

        If the awaiting task is cancelled while the worker is still opening
        the file, the handle is closed once the worker finishes.
        """
        task = asyncio.ensure_future(
            asyncio.to_thread(self._sync_store.get, ctx, path),
        )
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            task.add_done_callback(_close_orphaned_handle)
            raise

    async def insert(
        self,
        ctx: Context | None,
        source: Source,
        dest: PathLike,
    ) -> None:
        """Atomically store ``source`` at ``dest``."""
        await asyncio.to_thread(self._sync_store.insert, ctx, source, dest)

    async def remove(self, ctx: Context | None, path: PathLike) -> None:
        """Delete the object at ``path``."""
        await asyncio.to_thread(self._sync_store.remove, ctx, path)

    async def close(self) -> None:
        """Close the wrapped store."""
        self._sync_store.close()

    async def checksum(
        self,
        ctx: Context | None,
        path: PathLike,
        *,
        algorithm: ChecksumAlgorithm = "sha256",
    ) -> str:
        """Compute the object checksum in a worker thread."""
        return await asyncio.to_thread(
            self._sync_store.checksum,
            ctx,
            path,
            algorithm=algorithm,
        )


def _close_orphaned_handle(task: asyncio.Future[File]) -> None:
    if task.cancelled() or task.exception() is not None:
        return
    task.result().close()
