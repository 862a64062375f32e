"""Cancellable operation contexts passed to every store operation.

A context carries a cancellation flag and an optional deadline. Stores check
it when an operation starts and at safe points during long writes; blocking
filesystem calls already in progress are never interrupted.

Example:

    >>> from filestore import Context, LocalFileStore
    >>> store = LocalFileStore(root="/data")
    >>> ctx = Context.with_timeout(5.0)
    >>> store.insert(ctx, b"payload", "reports/today.bin")

    >>> # Cancel from another thread; the next check raises.
    >>> ctx.cancel()
    >>> store.get(ctx, "reports/today.bin")
    Traceback (most recent call last):
    ...
    filestore.interfaces.OperationCancelledError: Operation cancelled

"""

from __future__ import annotations

import threading
import time

from .interfaces import OperationCancelledError


class Context:
    """Cancellation flag with an optional monotonic deadline.

    Child contexts created with :meth:`child` are cancelled whenever their
    parent is, and inherit the earlier of the two deadlines.
    """

    def __init__(
        self,
        *,
        deadline: float | None = None,
        parent: Context | None = None,
    ) -> None:
        """Create a context.

        Args:
            deadline: Absolute ``time.monotonic()`` value after which the
                context counts as expired.
            parent: Optional parent whose cancellation propagates here.

        """
        self._event = threading.Event()
        self._deadline = deadline
        self._parent = parent

    @classmethod
    def with_timeout(cls, seconds: float) -> Context:
        """Return a context that expires ``seconds`` from now."""
        return cls(deadline=time.monotonic() + seconds)

    def child(self, *, timeout: float | None = None) -> Context:
        """Return a context cancelled together with this one."""
        deadline = None if timeout is None else time.monotonic() + timeout
        return Context(deadline=deadline, parent=self)

    @property
    def deadline(self) -> float | None:
        """Earliest deadline along the parent chain."""
        parent_deadline = self._parent.deadline if self._parent else None
        candidates = [d for d in (self._deadline, parent_deadline) if d is not None]
        return min(candidates) if candidates else None

    def cancel(self) -> None:
        """Mark the context as cancelled. Safe to call from any thread."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """True once cancelled explicitly, through a parent, or by deadline."""
        return self.reason() is not None

    def reason(self) -> str | None:
        """Return why the context is done, or None while it is still live."""
        if self._event.is_set():
            return "Operation cancelled"
        deadline = self.deadline
        if deadline is not None and time.monotonic() >= deadline:
            return "Operation deadline exceeded"
        if self._parent is not None:
            return self._parent.reason()
        return None

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelledError when the context is done."""
        reason = self.reason()
        if reason is not None:
            raise OperationCancelledError(reason)


def background() -> Context:
    """Return a fresh context that is never cancelled unless asked to be."""
    return Context()


def check(ctx: Context | None) -> None:
    """Raise if ``ctx`` is done; ``None`` is treated as a live context."""
    if ctx is not None:
        ctx.raise_if_cancelled()
