"""Filter state store with clamped mutators and property-type profiles."""

import logging

from yieldscope.models import (
    ABSOLUTE_MAX_PRICE,
    ABSOLUTE_MIN_PRICE,
    BATHROOM_RANGE,
    BEDROOM_RANGE,
    PARKING_RANGE,
    PRICE_STEP,
    FilterState,
    Location,
    PropertyType,
)

logger = logging.getLogger(__name__)

UNIT_PROFILE: dict[str, int] = {
    "bedrooms": 2,
    "bathrooms": 1,
    "parking": 1,
    "price_min": 0,
    "price_max": 1_500_000,
}

HOUSE_PROFILE: dict[str, int] = {
    "bedrooms": 3,
    "bathrooms": 2,
    "parking": 2,
    "price_min": 0,
    "price_max": 3_000_000,
}


def profile_for(property_type: PropertyType) -> dict[str, int]:
    """Default feature counts and price band for a property type's category."""
    return UNIT_PROFILE if property_type.is_unit_like else HOUSE_PROFILE


def _clamp(value: float, low: int, high: int) -> int:
    return int(max(low, min(high, round(value))))


def clamp_price(value: float) -> int:
    return _clamp(value, ABSOLUTE_MIN_PRICE, ABSOLUTE_MAX_PRICE)


def _snap(value: float) -> int:
    return int(round(value / PRICE_STEP) * PRICE_STEP)


class FilterStore:
    """Owns the current FilterState.

    Every mutator builds a new frozen state and swaps it in with a single
    assignment, so observers never see a half-applied transition.
    """

    def __init__(self, initial: FilterState | None = None):
        self._state = initial or FilterState()

    @property
    def state(self) -> FilterState:
        return self._state

    def _replace(self, **changes) -> FilterState:
        self._state = self._state.model_copy(update=changes)
        return self._state

    def set_location(self, location: Location | str) -> FilterState:
        return self._replace(location=Location(location))

    def set_property_type(self, property_type: PropertyType | str) -> FilterState:
        """Switch type and reset features and price band to the type's profile."""
        property_type = PropertyType(property_type)
        profile = profile_for(property_type)
        logger.debug("Applying %s profile: %s", property_type.value, profile)
        return self._replace(property_type=property_type, **profile)

    def set_bedrooms(self, count: float) -> FilterState:
        return self._replace(bedrooms=_clamp(count, *BEDROOM_RANGE))

    def set_bathrooms(self, count: float) -> FilterState:
        return self._replace(bathrooms=_clamp(count, *BATHROOM_RANGE))

    def set_parking(self, count: float) -> FilterState:
        return self._replace(parking=_clamp(count, *PARKING_RANGE))

    def set_price_range(self, low: float, high: float) -> FilterState:
        high = clamp_price(high)
        low = min(clamp_price(low), high)
        return self._replace(price_min=low, price_max=high)

    def set_price_min(self, value: float) -> FilterState:
        """Move the lower slider thumb, staying one step below the upper one."""
        low = min(clamp_price(_snap(value)), self._state.price_max - PRICE_STEP)
        return self._replace(price_min=max(ABSOLUTE_MIN_PRICE, low))

    def set_price_max(self, value: float) -> FilterState:
        """Move the upper slider thumb, staying one step above the lower one."""
        high = max(clamp_price(_snap(value)), self._state.price_min + PRICE_STEP)
        return self._replace(price_max=min(ABSOLUTE_MAX_PRICE, high))
