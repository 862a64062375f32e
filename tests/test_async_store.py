"""Tests for the asyncio local store wrapper.

Requires pytest and pytest-asyncio.

"""

from __future__ import annotations

import asyncio
import hashlib
import os
import threading
import time
from typing import TYPE_CHECKING

import pytest

from filestore import (
    AsyncFileStore,
    AsyncLocalFileStore,
    ConfigurationError,
    Context,
    LocalConfig,
    LocalFileStore,
    NotFoundError,
    OperationCancelledError,
)
from filestore.local import TEMP_PREFIX

if TYPE_CHECKING:
    from pathlib import Path


class TestAsyncLocalFileStore:
    """Test suite for AsyncLocalFileStore."""

    @pytest.fixture
    def store(self, tmp_path: Path) -> AsyncLocalFileStore:
        """Provide an async store rooted at a temporary directory."""
        return AsyncLocalFileStore(root=tmp_path)

    @pytest.mark.asyncio
    async def test_insert_and_get(self, store: AsyncLocalFileStore) -> None:
        """Round-trip through the async interface."""
        assert isinstance(store, AsyncFileStore)
        await store.insert(None, b"Hello, async world!", "nested/test.bin")
        fh = await store.get(None, "nested/test.bin")
        with fh:
            assert fh.read() == b"Hello, async world!"

    @pytest.mark.asyncio
    async def test_not_found(self, store: AsyncLocalFileStore) -> None:
        """Sentinel errors cross the thread boundary unchanged."""
        with pytest.raises(NotFoundError):
            await store.get(None, "missing.txt")
        with pytest.raises(NotFoundError):
            await store.remove(None, "missing.txt")

    @pytest.mark.asyncio
    async def test_remove(self, store: AsyncLocalFileStore, tmp_path: Path) -> None:
        """Removing deletes the file from disk."""
        await store.insert(None, b"x", "x.txt")
        await store.remove(None, "x.txt")
        assert not (tmp_path / "x.txt").exists()

    @pytest.mark.asyncio
    async def test_concurrent_inserts(self, store: AsyncLocalFileStore) -> None:
        """Independent inserts can run concurrently with gather."""
        await asyncio.gather(
            *(store.insert(None, f"{i}".encode(), f"many/{i}.txt") for i in range(20)),
        )
        for i in range(20):
            fh = await store.get(None, f"many/{i}.txt")
            with fh:
                assert fh.read() == f"{i}".encode()

    @pytest.mark.asyncio
    async def test_checksum(self, store: AsyncLocalFileStore) -> None:
        """Checksums are computed off the event loop."""
        await store.insert(None, b"digest", "d.bin")
        digest = await store.checksum(None, "d.bin", algorithm="sha512")
        assert digest == hashlib.sha512(b"digest").hexdigest()

    @pytest.mark.asyncio
    async def test_cancelled_context(self, store: AsyncLocalFileStore) -> None:
        """Operation contexts are honoured by the wrapped store."""
        ctx = Context()
        ctx.cancel()
        with pytest.raises(OperationCancelledError):
            await store.insert(ctx, b"x", "x.txt")

    @pytest.mark.asyncio
    async def test_async_context_manager(self, tmp_path: Path) -> None:
        """Leaving the async with block closes the store."""
        async with AsyncLocalFileStore(root=tmp_path) as store:
            await store.insert(None, b"x", "x.txt")
        assert store.sync_store.closed

    @pytest.mark.asyncio
    async def test_from_config(self, tmp_path: Path) -> None:
        """Async stores can be built from LocalConfig."""
        store = AsyncLocalFileStore.from_config(
            LocalConfig(root=tmp_path, strict_paths=True),
        )
        assert store.root == str(tmp_path)
        assert store.sync_store.config.strict_paths is True


def test_construction_errors_are_synchronous(tmp_path: Path) -> None:
    """Root validation happens in the constructor."""
    with pytest.raises(ConfigurationError):
        AsyncLocalFileStore(root=tmp_path / "missing")


class TestAsyncCancellation:
    """Cancelling the awaiting task while a worker thread is busy."""

    @pytest.mark.asyncio
    async def test_cancelled_get_closes_handle(self, tmp_path: Path) -> None:
        """A handle opened after its awaiter was cancelled is closed."""
        store = AsyncLocalFileStore(root=tmp_path)
        await store.insert(None, b"payload", "slow.txt")

        original_get = store.sync_store.get
        started = threading.Event()
        opened: list = []

        def slow_get(ctx: Context | None, path: str):  # noqa: ANN202
            started.set()
            time.sleep(0.3)
            fh = original_get(ctx, path)
            opened.append(fh)
            return fh

        store.sync_store.get = slow_get  # type: ignore[method-assign]

        task = asyncio.ensure_future(store.get(None, "slow.txt"))
        await asyncio.to_thread(started.wait, 5)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        async def handle_closed() -> None:
            while not (opened and opened[0].closed):
                await asyncio.sleep(0.01)

        await asyncio.wait_for(handle_closed(), timeout=5)
        assert opened[0].closed

    @pytest.mark.asyncio
    async def test_cancelled_insert_leaves_no_temp_file(self, tmp_path: Path) -> None:
        """An insert abandoned by its awaiter and its context rolls back."""
        store = AsyncLocalFileStore(root=tmp_path)
        ctx = Context()
        started = threading.Event()
        release = threading.Event()
        finished = threading.Event()

        def chunks():  # noqa: ANN202
            yield b"first chunk"
            started.set()
            release.wait(5)
            yield b"second chunk"

        original_insert = store.sync_store.insert

        def tracked_insert(*args, **kwargs) -> None:  # noqa: ANN002, ANN003
            try:
                original_insert(*args, **kwargs)
            finally:
                finished.set()

        store.sync_store.insert = tracked_insert  # type: ignore[method-assign]

        task = asyncio.ensure_future(store.insert(ctx, chunks(), "slow/out.bin"))
        await asyncio.to_thread(started.wait, 5)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        ctx.cancel()
        release.set()
        assert await asyncio.to_thread(finished.wait, 5)

        assert not (tmp_path / "slow" / "out.bin").exists()
        leftovers = [
            name
            for name in os.listdir(tmp_path / "slow")
            if name.startswith(TEMP_PREFIX)
        ]
        assert leftovers == []


def test_from_config_runs_subclass_init(tmp_path: Path) -> None:
    """from_config goes through __init__, so subclasses keep their state."""

    class TaggedStore(AsyncLocalFileStore):
        def __init__(self, *args, **kwargs) -> None:  # noqa: ANN002, ANN003
            super().__init__(*args, **kwargs)
            self.tag = "tagged"

    store = TaggedStore.from_config(LocalConfig(root=tmp_path, durable=False))
    assert store.tag == "tagged"
    assert store.sync_store.config.durable is False


def test_wraps_existing_sync_store(tmp_path: Path) -> None:
    """An existing LocalFileStore can be wrapped directly."""
    sync_store = LocalFileStore(root=tmp_path)
    store = AsyncLocalFileStore(sync_store=sync_store)
    assert store.sync_store is sync_store
