"""Query construction: filter state to provider request."""

from yieldscope.models import (
    ABSOLUTE_MAX_PRICE,
    ABSOLUTE_MIN_PRICE,
    FilterState,
    MarketFilters,
    MarketRequest,
)


def build_market_filters(state: FilterState, price_range: tuple[int, int]) -> MarketFilters:
    """Build the provider filter request.

    ``price_range`` is the debounced range, not the live slider value. A bound
    sitting at its sentinel extreme means "no constraint" and is omitted.

    Examples:
        (0, 3_000_000)       -> no min_price, no max_price
        (500_000, 3_000_000) -> min_price="500000"
    """
    low, high = price_range
    return MarketFilters(
        bedrooms=str(state.bedrooms),
        bathrooms=str(state.bathrooms),
        parking=str(state.parking),
        min_price=str(low) if low > ABSOLUTE_MIN_PRICE else None,
        max_price=str(high) if high < ABSOLUTE_MAX_PRICE else None,
    )


def build_market_request(state: FilterState, price_range: tuple[int, int]) -> MarketRequest:
    return MarketRequest(
        location=state.location,
        property_type=state.property_type,
        filters=build_market_filters(state, price_range),
    )


def describe_price_band(filters: MarketFilters) -> str:
    """Render the price clause used in the provider prompt."""
    if filters.min_price and filters.max_price:
        return (
            f" with a median sold price between ${filters.min_price}"
            f" and ${filters.max_price}"
        )
    if filters.min_price:
        return f" with a median sold price above ${filters.min_price}"
    if filters.max_price:
        return f" with a median sold price below ${filters.max_price}"
    return ""


def describe_features(filters: MarketFilters) -> str:
    return (
        f"{filters.bedrooms}-bedroom, {filters.bathrooms}-bathroom, "
        f"{filters.parking}-carspace"
    )
