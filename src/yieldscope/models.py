"""Pydantic data models for the rental-yield dashboard."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

ABSOLUTE_MIN_PRICE = 0
ABSOLUTE_MAX_PRICE = 3_000_000
PRICE_STEP = 50_000

BEDROOM_RANGE = (1, 5)
BATHROOM_RANGE = (1, 3)
PARKING_RANGE = (0, 3)


class LocationGroup(str, Enum):
    CAPITAL = "capital"
    REGIONAL = "regional"


class Location(str, Enum):
    # Capitals
    MELBOURNE = "Melbourne"
    SYDNEY = "Sydney"
    BRISBANE = "Brisbane"
    PERTH = "Perth"
    ADELAIDE = "Adelaide"
    HOBART = "Hobart"
    DARWIN = "Darwin"
    CANBERRA = "Canberra"

    # Regional QLD
    GOLD_COAST = "Gold Coast, QLD"
    SUNSHINE_COAST = "Sunshine Coast, QLD"
    TWEED_HEADS = "Tweed Heads, NSW"  # NSW, but marketed with Coolangatta
    CAIRNS = "Cairns, QLD"
    TOWNSVILLE = "Townsville, QLD"
    TOOWOOMBA = "Toowoomba, QLD"
    ROCKHAMPTON = "Rockhampton, QLD"

    # Regional NSW
    NEWCASTLE = "Newcastle, NSW"
    WOLLONGONG = "Wollongong, NSW"
    ALBURY = "Albury, NSW"
    WAGGA_WAGGA = "Wagga Wagga, NSW"

    # Regional VIC
    GEELONG = "Geelong, VIC"
    BALLARAT = "Ballarat, VIC"
    BENDIGO = "Bendigo, VIC"

    # Regional TAS
    LAUNCESTON = "Launceston, TAS"
    DEVONPORT = "Devonport, TAS"

    @property
    def group(self) -> LocationGroup:
        # Only regional centres carry a state suffix
        return LocationGroup.REGIONAL if "," in self.value else LocationGroup.CAPITAL


def locations_by_group() -> dict[LocationGroup, list[Location]]:
    """Return the location catalog grouped for the capital/regional picker."""
    grouped: dict[LocationGroup, list[Location]] = {group: [] for group in LocationGroup}
    for location in Location:
        grouped[location.group].append(location)
    return grouped


class PropertyType(str, Enum):
    HOUSE = "House"
    APARTMENT = "Apartment"
    UNIT = "Unit"
    TOWNHOUSE = "Townhouse"

    @property
    def is_unit_like(self) -> bool:
        return self in (PropertyType.APARTMENT, PropertyType.UNIT)


class FetchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


def compute_rental_yield(median_sold_price: float, median_weekly_rent: float) -> float:
    """Gross annual rental yield as a percentage, rounded to 2 decimals."""
    return round(median_weekly_rent * 52 / median_sold_price * 100, 2)


class FilterState(BaseModel):
    """Snapshot of every user-selected filter dimension."""

    model_config = ConfigDict(frozen=True)

    location: Location = Location.MELBOURNE
    property_type: PropertyType = PropertyType.HOUSE
    bedrooms: int = Field(default=3, ge=BEDROOM_RANGE[0], le=BEDROOM_RANGE[1])
    bathrooms: int = Field(default=2, ge=BATHROOM_RANGE[0], le=BATHROOM_RANGE[1])
    parking: int = Field(default=2, ge=PARKING_RANGE[0], le=PARKING_RANGE[1])
    price_min: int = Field(default=ABSOLUTE_MIN_PRICE, ge=ABSOLUTE_MIN_PRICE, le=ABSOLUTE_MAX_PRICE)
    price_max: int = Field(default=ABSOLUTE_MAX_PRICE, ge=ABSOLUTE_MIN_PRICE, le=ABSOLUTE_MAX_PRICE)

    @model_validator(mode="after")
    def _ordered_price_band(self) -> "FilterState":
        if self.price_min > self.price_max:
            raise ValueError(
                f"price_min ({self.price_min}) must not exceed price_max ({self.price_max})"
            )
        return self

    @property
    def price_range(self) -> tuple[int, int]:
        return (self.price_min, self.price_max)


class MarketFilters(BaseModel):
    """Normalized filter request sent to the market data provider."""

    model_config = ConfigDict(frozen=True)

    bedrooms: str
    bathrooms: str
    parking: str
    min_price: Optional[str] = None
    max_price: Optional[str] = None


class MarketRequest(BaseModel):
    """One coherent query: where, what, and with which filters."""

    model_config = ConfigDict(frozen=True)

    location: Location
    property_type: PropertyType
    filters: MarketFilters

    @property
    def cache_key(self) -> tuple:
        f = self.filters
        return (
            self.location.value,
            self.property_type.value,
            f.bedrooms,
            f.bathrooms,
            f.parking,
            f.min_price,
            f.max_price,
        )


class SuburbRecord(BaseModel):
    """Per-suburb market figures with a derived rental yield."""

    model_config = ConfigDict(frozen=True)

    suburb_name: str
    median_sold_price: float = Field(gt=0)
    median_weekly_rent: float = Field(gt=0)
    property_type: PropertyType

    @computed_field
    @property
    def rental_yield(self) -> float:
        return compute_rental_yield(self.median_sold_price, self.median_weekly_rent)


class ProviderSuburb(BaseModel):
    """One suburb exactly as the provider reports it."""

    name: str = Field(min_length=1)
    median_price: float = Field(alias="medianPrice")
    weekly_rent: float = Field(alias="weeklyRent")

    model_config = ConfigDict(populate_by_name=True)


class ProviderPayload(BaseModel):
    """The structured JSON document returned by the provider."""

    summary: str
    suburbs: list[ProviderSuburb]


class MarketAnalysis(BaseModel):
    """Result of one successful provider fetch."""

    model_config = ConfigDict(frozen=True)

    location: Location
    property_type: PropertyType
    last_updated: str
    data: list[SuburbRecord] = Field(default_factory=list)
    summary: str = ""


class FetchState(BaseModel):
    """Fetch lifecycle state. Replaced wholesale on every transition."""

    model_config = ConfigDict(frozen=True)

    status: FetchStatus = FetchStatus.IDLE
    analysis: Optional[MarketAnalysis] = None
    error: Optional[str] = None

    @classmethod
    def idle(cls) -> "FetchState":
        return cls()

    def loading(self) -> "FetchState":
        # Keep the previous analysis until a terminal state replaces it
        return FetchState(status=FetchStatus.LOADING, analysis=self.analysis)

    @classmethod
    def succeeded(cls, analysis: MarketAnalysis) -> "FetchState":
        return cls(status=FetchStatus.SUCCESS, analysis=analysis)

    @classmethod
    def failed(cls, reason: str) -> "FetchState":
        return cls(status=FetchStatus.ERROR, error=reason)


class SuburbRow(BaseModel):
    """A table/chart row as handed to the presentation layer."""

    suburb_name: str
    median_sold_price: float
    median_weekly_rent: float
    rental_yield: float
    median_price_label: str


class DashboardView(BaseModel):
    """Everything the presentation layer needs to render one frame."""

    filters: FilterState
    price_label: str
    status: FetchStatus
    error: Optional[str] = None
    summary: Optional[str] = None
    last_updated: Optional[str] = None
    suburbs_analyzed: int = 0
    rows: list[SuburbRow] = Field(default_factory=list)
    is_empty: bool = False
    dark_mode: bool = False
