"""Trailing-edge debouncing on the asyncio event loop."""

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING: Any = object()


class Debouncer(Generic[T]):
    """Emit the most recent pushed value once input has been quiet for ``interval``.

    Each push cancels the pending timer before arming a new one, so at most
    one timer is ever outstanding. Must be used from a running event loop.
    """

    def __init__(self, interval: float, callback: Callable[[T], None]):
        self._interval = interval
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._value: T = _MISSING

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: T) -> None:
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._value = value
        self._handle = loop.call_later(self._interval, self._fire)

    def flush(self) -> None:
        """Emit the pending value immediately, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()

    def cancel(self) -> None:
        """Drop any pending emission without calling back."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._value = _MISSING

    def _fire(self) -> None:
        value = self._value
        self._handle = None
        self._value = _MISSING
        logger.debug("Debounced value settled: %r", value)
        self._callback(value)


async def debounce(source: AsyncIterable[T], interval: float) -> AsyncIterator[T]:
    """Yield values from ``source`` only after ``interval`` seconds of quiet.

    A value still pending when ``source`` is exhausted is flushed. Closing the
    generator cancels any pending timer.
    """
    settled: asyncio.Queue = asyncio.Queue()
    debouncer: Debouncer[T] = Debouncer(interval, settled.put_nowait)
    iterator = source.__aiter__()
    next_item: asyncio.Future = asyncio.ensure_future(iterator.__anext__())
    next_settled: asyncio.Future = asyncio.ensure_future(settled.get())
    try:
        while True:
            done, _ = await asyncio.wait(
                {next_item, next_settled}, return_when=asyncio.FIRST_COMPLETED
            )
            if next_settled in done:
                yield next_settled.result()
                next_settled = asyncio.ensure_future(settled.get())
            if next_item in done:
                try:
                    debouncer.push(next_item.result())
                except StopAsyncIteration:
                    next_settled.cancel()
                    debouncer.flush()
                    while not settled.empty():
                        yield settled.get_nowait()
                    return
                next_item = asyncio.ensure_future(iterator.__anext__())
    finally:
        debouncer.cancel()
        next_item.cancel()
        next_settled.cancel()
