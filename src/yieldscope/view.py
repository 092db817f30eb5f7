"""Derived view model: yields, ordering, price banding and display labels."""

import logging
from collections.abc import Iterable
from datetime import date
from typing import Optional

from yieldscope.models import (
    ABSOLUTE_MAX_PRICE,
    DashboardView,
    FetchState,
    FetchStatus,
    FilterState,
    Location,
    MarketAnalysis,
    PropertyType,
    ProviderPayload,
    SuburbRecord,
    SuburbRow,
    compute_rental_yield,
)

logger = logging.getLogger(__name__)

__all__ = [
    "apply_price_band",
    "build_dashboard_view",
    "build_market_analysis",
    "compute_rental_yield",
    "derive_rows",
    "format_price",
    "format_price_band",
    "sort_by_yield",
]


def sort_by_yield(records: Iterable[SuburbRecord]) -> list[SuburbRecord]:
    """Highest yield first. Equal yields keep provider order (sorted is stable)."""
    return sorted(records, key=lambda r: r.rental_yield, reverse=True)


def apply_price_band(
    records: Iterable[SuburbRecord], low: float, high: float
) -> list[SuburbRecord]:
    return [r for r in records if low <= r.median_sold_price <= high]


def build_market_analysis(
    location: Location,
    property_type: PropertyType,
    payload: ProviderPayload,
    today: Optional[date] = None,
) -> MarketAnalysis:
    """Turn a provider payload into a MarketAnalysis with recomputed yields."""
    records: list[SuburbRecord] = []
    for suburb in payload.suburbs:
        if suburb.median_price <= 0 or suburb.weekly_rent <= 0:
            logger.warning(
                "Dropping %s: non-positive figures (price=%s, rent=%s)",
                suburb.name,
                suburb.median_price,
                suburb.weekly_rent,
            )
            continue
        records.append(
            SuburbRecord(
                suburb_name=suburb.name,
                median_sold_price=suburb.median_price,
                median_weekly_rent=suburb.weekly_rent,
                property_type=property_type,
            )
        )
    return MarketAnalysis(
        location=location,
        property_type=property_type,
        last_updated=(today or date.today()).strftime("%d/%m/%Y"),
        data=sort_by_yield(records),
        summary=payload.summary,
    )


def derive_rows(
    analysis: MarketAnalysis, price_band: Optional[tuple[float, float]] = None
) -> list[SuburbRecord]:
    """Records actually shown: optionally banded by price, always yield-sorted."""
    records = analysis.data
    if price_band is not None:
        records = apply_price_band(records, *price_band)
    return sort_by_yield(records)


def format_price(value: float) -> str:
    """Compact AUD label: $1.5M, $850k, $900."""
    if value >= 1_000_000:
        return f"${value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"${value / 1_000:.0f}k"
    return f"${value:.0f}"


def format_price_band(low: float, high: float) -> str:
    label = f"{format_price(low)} - {format_price(high)}"
    if high >= ABSOLUTE_MAX_PRICE:
        label += "+"
    return label


def _to_row(record: SuburbRecord) -> SuburbRow:
    return SuburbRow(
        suburb_name=record.suburb_name,
        median_sold_price=record.median_sold_price,
        median_weekly_rent=record.median_weekly_rent,
        rental_yield=record.rental_yield,
        median_price_label=format_price(record.median_sold_price),
    )


def build_dashboard_view(
    filters: FilterState,
    fetch_state: FetchState,
    price_band: Optional[tuple[float, float]] = None,
    dark_mode: bool = False,
) -> DashboardView:
    """Assemble the render model for the current filters and fetch state.

    ``price_band`` enables the client-side post-filter; pass None to show the
    provider's rows unfiltered.
    """
    view = DashboardView(
        filters=filters,
        price_label=format_price_band(filters.price_min, filters.price_max),
        status=fetch_state.status,
        dark_mode=dark_mode,
    )
    if fetch_state.status is FetchStatus.ERROR:
        return view.model_copy(update={"error": fetch_state.error})
    if fetch_state.status is not FetchStatus.SUCCESS or fetch_state.analysis is None:
        return view

    analysis = fetch_state.analysis
    rows = [_to_row(r) for r in derive_rows(analysis, price_band)]
    return view.model_copy(
        update={
            "summary": analysis.summary,
            "last_updated": analysis.last_updated,
            "suburbs_analyzed": len(analysis.data),
            "rows": rows,
            "is_empty": not rows,
        }
    )
