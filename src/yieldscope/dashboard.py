"""Dashboard controller: filter state in, one coherent fetch out."""

import asyncio
import logging
from typing import NamedTuple

from yieldscope.config import YieldscopeConfig
from yieldscope.debounce import Debouncer
from yieldscope.filters import FilterStore
from yieldscope.models import (
    ABSOLUTE_MAX_PRICE,
    ABSOLUTE_MIN_PRICE,
    DashboardView,
    FetchState,
    FilterState,
    Location,
    PropertyType,
)
from yieldscope.orchestrator import FetchOrchestrator, MarketDataProvider
from yieldscope.query import build_market_request
from yieldscope.theme import ThemeStore
from yieldscope.view import build_dashboard_view

logger = logging.getLogger(__name__)


class Snapshot(NamedTuple):
    """Every dimension that decides whether a new fetch is warranted."""

    location: Location
    property_type: PropertyType
    bedrooms: int
    bathrooms: int
    parking: int
    price_range: tuple[int, int]


class Dashboard:
    """Owns filter state, the price debouncer and the fetch orchestrator.

    User actions mutate the FilterStore. Price edits pass through the
    debouncer; everything else reconciles straight away. A fetch is issued
    only when the coherent snapshot differs from the last one requested, or
    when the user explicitly refreshes.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        config: YieldscopeConfig | None = None,
        theme: ThemeStore | None = None,
        initial: FilterState | None = None,
    ):
        self._config = config or YieldscopeConfig()
        self._store = FilterStore(initial)
        self._debounced_price = self._store.state.price_range
        self._debouncer: Debouncer[tuple[int, int]] = Debouncer(
            self._config.debounce_seconds, self._on_price_settled
        )
        self._orchestrator = FetchOrchestrator(provider)
        self._theme = theme or ThemeStore(
            self._config.preferences_path, self._config.prefers_dark
        )
        self._requested: Snapshot | None = None

    @property
    def filters(self) -> FilterState:
        return self._store.state

    @property
    def debounced_price(self) -> tuple[int, int]:
        return self._debounced_price

    @property
    def fetch_state(self) -> FetchState:
        return self._orchestrator.state

    @property
    def orchestrator(self) -> FetchOrchestrator:
        return self._orchestrator

    @property
    def started(self) -> bool:
        return self._requested is not None

    def snapshot(self) -> Snapshot:
        state = self._store.state
        return Snapshot(
            state.location,
            state.property_type,
            state.bedrooms,
            state.bathrooms,
            state.parking,
            self._debounced_price,
        )

    def _reconcile(self, force: bool = False) -> asyncio.Task | None:
        snapshot = self.snapshot()
        if not force and snapshot == self._requested:
            return None
        self._requested = snapshot
        request = build_market_request(self._store.state, self._debounced_price)
        return self._orchestrator.request(request, use_cache=not force)

    def start(self) -> asyncio.Task | None:
        """Issue the initial fetch for the default filters."""
        return self._reconcile()

    def set_location(self, location: Location | str) -> asyncio.Task | None:
        self._store.set_location(location)
        return self._reconcile()

    def set_property_type(self, property_type: PropertyType | str) -> asyncio.Task | None:
        # The profile replaces the price band outright, so a half-typed slider
        # value must not land afterwards.
        self._debouncer.cancel()
        state = self._store.set_property_type(property_type)
        self._debounced_price = state.price_range
        return self._reconcile()

    def set_bedrooms(self, count: int) -> asyncio.Task | None:
        self._store.set_bedrooms(count)
        return self._reconcile()

    def set_bathrooms(self, count: int) -> asyncio.Task | None:
        self._store.set_bathrooms(count)
        return self._reconcile()

    def set_parking(self, count: int) -> asyncio.Task | None:
        self._store.set_parking(count)
        return self._reconcile()

    def set_features(
        self,
        bedrooms: int | None = None,
        bathrooms: int | None = None,
        parking: int | None = None,
    ) -> asyncio.Task | None:
        """Apply several feature counts, then reconcile once."""
        if bedrooms is not None:
            self._store.set_bedrooms(bedrooms)
        if bathrooms is not None:
            self._store.set_bathrooms(bathrooms)
        if parking is not None:
            self._store.set_parking(parking)
        return self._reconcile()

    def _push_price(self, state: FilterState) -> None:
        # Nothing has been fetched yet, so the band goes straight into the
        # first request instead of waiting out the quiet period.
        if not self.started:
            self._debounced_price = state.price_range
            return
        self._debouncer.push(state.price_range)

    def set_price_range(self, low: float, high: float) -> None:
        self._push_price(self._store.set_price_range(low, high))

    def set_price_min(self, value: float) -> None:
        self._push_price(self._store.set_price_min(value))

    def set_price_max(self, value: float) -> None:
        self._push_price(self._store.set_price_max(value))

    def _on_price_settled(self, price_range: tuple[int, int]) -> None:
        self._debounced_price = price_range
        self._reconcile()

    def reset_price_filters(self) -> asyncio.Task | None:
        """Widen the price band to the full range (the "no matches" action)."""
        self._debouncer.cancel()
        state = self._store.set_price_range(ABSOLUTE_MIN_PRICE, ABSOLUTE_MAX_PRICE)
        self._debounced_price = state.price_range
        return self._reconcile()

    def refresh(self) -> asyncio.Task | None:
        """Re-run the current request unconditionally, skipping the cache."""
        return self._reconcile(force=True)

    def toggle_theme(self) -> bool:
        return self._theme.toggle()

    async def settle(self) -> FetchState:
        """Wait until no price edit is pending and no fetch is in flight."""
        while True:
            if self._debouncer.pending:
                await asyncio.sleep(self._debouncer.interval)
            elif self._orchestrator.busy:
                await self._orchestrator.wait()
            else:
                return self._orchestrator.state

    def view(self) -> DashboardView:
        band = self._debounced_price if self._config.client_price_filter else None
        return build_dashboard_view(
            self._store.state,
            self._orchestrator.state,
            price_band=band,
            dark_mode=self._theme.dark_mode,
        )

    async def aclose(self) -> None:
        self._debouncer.cancel()
        await self._orchestrator.aclose()

    async def __aenter__(self) -> "Dashboard":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
