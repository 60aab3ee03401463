"""Cooperative cancellation for in-flight synthesis."""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from .errors import SynthesisCancelled

T = TypeVar("T")


class CancellationToken:
    """
    Signal shared between a caller and the synthesis it started.

    The provider checks the token before and between chunk dispatches and
    races the joint chunk await against it, so setting the token stops
    in-flight remote calls instead of only ignoring their results.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str | None = None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SynthesisCancelled(self.reason or "Synthesis cancelled")

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        On cancellation the awaited work is cancelled and
        :class:`SynthesisCancelled` is raised.
        """
        self.raise_if_cancelled()
        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            waiter.cancel()

        if work.done():
            return work.result()

        work.cancel()
        # Collect the outcome so a failure while unwinding is not left unretrieved
        await asyncio.gather(work, return_exceptions=True)
        raise SynthesisCancelled(self.reason or "Synthesis cancelled")


__all__ = ["CancellationToken"]
