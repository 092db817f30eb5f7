"""Fetch lifecycle: one attempt per trigger, newest attempt wins."""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from yieldscope.models import (
    FetchState,
    Location,
    MarketAnalysis,
    MarketFilters,
    MarketRequest,
    PropertyType,
)
from yieldscope.provider.client import GENERIC_FAILURE, MarketDataError

logger = logging.getLogger(__name__)

Listener = Callable[[FetchState], None]


class MarketDataProvider(Protocol):
    def check_credentials(self) -> None: ...

    async def fetch_market_data(
        self,
        location: Location,
        property_type: PropertyType,
        filters: MarketFilters,
        use_cache: bool = True,
    ) -> MarketAnalysis: ...


class FetchOrchestrator:
    """Drives Idle -> Loading -> Success/Error for market data requests.

    Every attempt is tagged with a generation number. A completed attempt is
    applied only if no newer attempt has started since, so a slow response
    can never overwrite the state produced by a faster, newer one.
    """

    def __init__(self, provider: MarketDataProvider):
        self._provider = provider
        self._state = FetchState.idle()
        self._generation = 0
        self._last_request: MarketRequest | None = None
        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[Listener] = []
        self._closed = False

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def busy(self) -> bool:
        return any(not task.done() for task in self._tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: FetchState) -> None:
        if state.status is not self._state.status:
            logger.info("Fetch state %s -> %s", self._state.status.value, state.status.value)
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def request(self, request: MarketRequest, use_cache: bool = True) -> asyncio.Task | None:
        """Start a new attempt for ``request``.

        Returns the attempt's task, or None if no network call was made
        because a precondition failed (state is then ERROR).
        """
        if self._closed:
            logger.debug("Ignoring request on closed orchestrator")
            return None

        self._generation += 1
        generation = self._generation
        self._last_request = request

        try:
            self._provider.check_credentials()
        except MarketDataError as exc:
            logger.error("Precondition failed: %s", exc)
            self._set_state(FetchState.failed(str(exc)))
            return None

        self._set_state(self._state.loading())
        task = asyncio.get_running_loop().create_task(
            self._attempt(generation, request, use_cache)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def retry(self) -> asyncio.Task | None:
        """Re-issue the most recent request, bypassing any cached result."""
        if self._last_request is None:
            return None
        return self.request(self._last_request, use_cache=False)

    async def _attempt(self, generation: int, request: MarketRequest, use_cache: bool) -> None:
        try:
            analysis = await self._provider.fetch_market_data(
                request.location,
                request.property_type,
                request.filters,
                use_cache=use_cache,
            )
        except MarketDataError as exc:
            outcome = FetchState.failed(str(exc))
        except Exception:
            logger.exception("Unexpected error fetching market data")
            outcome = FetchState.failed(GENERIC_FAILURE)
        else:
            outcome = FetchState.succeeded(analysis)

        if self._closed or generation != self._generation:
            logger.debug(
                "Discarding stale %s result (generation %d, current %d)",
                outcome.status.value,
                generation,
                self._generation,
            )
            return
        self._set_state(outcome)

    async def wait(self) -> FetchState:
        """Wait for every in-flight attempt to finish and return the state."""
        while self.busy:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        return self._state

    async def aclose(self) -> None:
        self._closed = True
        self._generation += 1
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._listeners.clear()
