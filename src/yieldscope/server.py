"""Yieldscope MCP server: drive the rental-yield dashboard from an agent."""

import logging
import sys
from typing import Optional

from fastmcp import FastMCP

from yieldscope.dashboard import Dashboard
from yieldscope.models import Location, PropertyType, locations_by_group
from yieldscope.provider.client import get_client

# Route ALL logging to stderr; stdout is reserved for MCP protocol messages
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="yieldscope",
    instructions=(
        "Yieldscope shows AI-estimated median prices, weekly rents and rental "
        "yields per suburb for Australian cities and regional centres. "
        "Use list_locations to see the catalog, select_location, "
        "select_property_type, set_features and set_price_range to filter, "
        "and get_dashboard to read the current table. Every tool returns the "
        "dashboard view after the latest fetch has finished."
    ),
)

_dashboard: Dashboard | None = None


def get_controller() -> Dashboard:
    """Return the module-level Dashboard, creating it on first use."""
    global _dashboard
    if _dashboard is None:
        client = get_client()
        _dashboard = Dashboard(client, config=client.config)
    return _dashboard


async def _render(dashboard: Dashboard) -> dict:
    if not dashboard.started:
        dashboard.start()
    await dashboard.settle()
    return dashboard.view().model_dump(mode="json")


@mcp.tool()
async def get_dashboard() -> dict:
    """Get the current dashboard: filters, status, market summary and suburb rows.

    Rows are sorted by rental yield, highest first. When status is 'error' the
    'error' field explains why; when 'is_empty' is true no suburb matched and
    reset_price_filters can widen the search.
    """
    return await _render(get_controller())


@mcp.tool()
async def list_locations() -> dict:
    """List the selectable locations, grouped into capitals and regional centres."""
    return {
        group.value: [location.value for location in locations]
        for group, locations in locations_by_group().items()
    }


@mcp.tool()
async def select_location(location: str) -> dict:
    """Switch the dashboard to another city or region.

    Args:
        location: A catalog name, e.g. 'Sydney' or 'Gold Coast, QLD'.
    """
    logger.info("select_location called: %s", location)
    try:
        target = Location(location)
    except ValueError:
        return {"error": f"Unknown location: {location}"}
    dashboard = get_controller()
    dashboard.set_location(target)
    return await _render(dashboard)


@mcp.tool()
async def select_property_type(property_type: str) -> dict:
    """Switch property type. Bedrooms, bathrooms, parking and price reset to the type's defaults.

    Args:
        property_type: One of House, Apartment, Unit, Townhouse.
    """
    logger.info("select_property_type called: %s", property_type)
    try:
        target = PropertyType(property_type)
    except ValueError:
        return {"error": f"Unknown property type: {property_type}"}
    dashboard = get_controller()
    dashboard.set_property_type(target)
    return await _render(dashboard)


@mcp.tool()
async def set_features(
    bedrooms: Optional[int] = None,
    bathrooms: Optional[int] = None,
    parking: Optional[int] = None,
) -> dict:
    """Set feature counts. Out-of-range values are clamped.

    Args:
        bedrooms: 1-5 (5 means 5+).
        bathrooms: 1-3 (3 means 3+).
        parking: 0-3 car spaces (3 means 3+).
    """
    logger.info(
        "set_features called: bed=%s bath=%s car=%s", bedrooms, bathrooms, parking
    )
    dashboard = get_controller()
    dashboard.set_features(bedrooms=bedrooms, bathrooms=bathrooms, parking=parking)
    return await _render(dashboard)


@mcp.tool()
async def set_price_range(price_min: int = 0, price_max: int = 3_000_000) -> dict:
    """Limit suburbs by median sold price (AUD). 0 and 3,000,000 mean unbounded.

    Args:
        price_min: Lower bound in dollars.
        price_max: Upper bound in dollars.
    """
    logger.info("set_price_range called: %s-%s", price_min, price_max)
    dashboard = get_controller()
    dashboard.set_price_range(price_min, price_max)
    return await _render(dashboard)


@mcp.tool()
async def reset_price_filters() -> dict:
    """Remove the price limits and fetch again."""
    dashboard = get_controller()
    dashboard.reset_price_filters()
    return await _render(dashboard)


@mcp.tool()
async def refresh_estimates() -> dict:
    """Request fresh estimates for the current filters, ignoring cached results."""
    dashboard = get_controller()
    dashboard.refresh()
    return await _render(dashboard)


@mcp.tool()
async def toggle_theme() -> dict:
    """Flip between dark and light mode. The choice is remembered across sessions."""
    dark = get_controller().toggle_theme()
    return {"dark_mode": dark}


def main() -> None:
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
