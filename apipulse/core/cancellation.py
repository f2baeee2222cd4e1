"""Cooperative cancellation signals shared by workers and the progress task."""

import asyncio
import time
from typing import Optional


class CancellationToken:
    """A flag the caller sets to stop a running test early."""

    def __init__(self):
        self._event = asyncio.Event()
        self.cancelled_at: Optional[float] = None

    def cancel(self) -> None:
        if self.cancelled_at is None:
            self.cancelled_at = time.monotonic()
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


class DeadlineSignal:
    """
    Fires when the deadline passes or the linked token is cancelled,
    whichever happens first.

    The deadline is an absolute ``time.monotonic()`` value.
    """

    def __init__(self, deadline: float, token: Optional[CancellationToken] = None):
        self.deadline = deadline
        self.token = token

    @classmethod
    def after(
        cls, seconds: float, token: Optional[CancellationToken] = None
    ) -> "DeadlineSignal":
        return cls(time.monotonic() + seconds, token)

    @property
    def deadline_reached(self) -> bool:
        return time.monotonic() >= self.deadline

    @property
    def cancelled_early(self) -> bool:
        """Check if the token fired before the deadline."""
        return (
            self.token is not None
            and self.token.cancelled_at is not None
            and self.token.cancelled_at < self.deadline
        )

    @property
    def fired(self) -> bool:
        return self.deadline_reached or (
            self.token is not None and self.token.cancelled
        )

    def remaining(self) -> float:
        return max(0.0, self.deadline - time.monotonic())

    async def wait(self) -> None:
        """Block until the signal fires."""
        if self.token is None:
            # The loop clock may wake a sleeper marginally early
            while not self.deadline_reached:
                await asyncio.sleep(self.remaining())
            return

        waiter = asyncio.ensure_future(self.token.wait())
        try:
            while not self.fired:
                await asyncio.wait({waiter}, timeout=self.remaining())
        finally:
            waiter.cancel()
