"""
Deadline / cancellation token for one assessment.

An absolute expiry on the monotonic clock plus an explicit cancel flag.
External calls are bounded by min(call timeout, remaining budget). Once the
deadline has passed or is cancelled, calls fail with TimeoutError (in-flight
calls are abandoned) so analyzers take their fallback immediately.
"""

from __future__ import annotations

import asyncio
import threading
import time
from typing import Awaitable, TypeVar

T = TypeVar("T")

# How often an in-flight call checks the cancel flag, which may be set from another thread
CANCEL_POLL_SEC = 0.02


class Deadline:
    """Monotonic deadline that can also be cancelled from another thread."""

    def __init__(self, expires_at: float | None = None) -> None:
        self._expires_at = expires_at
        self._cancelled = threading.Event()

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(time.monotonic() + max(0.0, seconds))

    @classmethod
    def never(cls) -> "Deadline":
        return cls(None)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        """Seconds left; 0.0 when expired or cancelled, None when unbounded."""
        if self._cancelled.is_set():
            return 0.0
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        left = self.remaining()
        return left is not None and left <= 0.0

    def budget(self, timeout: float) -> float:
        """Effective timeout for one call: min(timeout, remaining)."""
        left = self.remaining()
        if left is None:
            return timeout
        return min(timeout, left)


def budget_for(timeout: float, deadline: Deadline | None = None) -> float:
    """Seconds one external call may take: timeout, reduced by the deadline when given."""
    return deadline.budget(timeout) if deadline is not None else timeout


async def _wait_cancelled(deadline: Deadline) -> None:
    while not deadline.cancelled:
        await asyncio.sleep(CANCEL_POLL_SEC)


async def bounded(awaitable: Awaitable[T], budget: float, deadline: Deadline | None = None) -> T:
    """
    Await one external call within budget seconds (see budget_for).

    Raises asyncio.TimeoutError when the budget runs out or the deadline is
    cancelled while the call is in flight; the call is cancelled either way.
    A budget of 0 raises without awaiting.
    """
    if budget <= 0:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise asyncio.TimeoutError("deadline exhausted before call")
    if deadline is None:
        return await asyncio.wait_for(awaitable, timeout=budget)

    call = asyncio.ensure_future(awaitable)
    watcher = asyncio.ensure_future(_wait_cancelled(deadline))
    try:
        done, _ = await asyncio.wait(
            {call, watcher}, timeout=budget, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        watcher.cancel()
        if not call.done():
            call.cancel()
    if call in done:
        return call.result()
    if deadline.cancelled:
        raise asyncio.TimeoutError("deadline cancelled during call")
    raise asyncio.TimeoutError(f"call exceeded {budget:.3f}s budget")
