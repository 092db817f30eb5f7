"""Endpoint URL and request body construction for the generative provider."""

from yieldscope.models import Location, MarketFilters, PropertyType
from yieldscope.query import describe_features, describe_price_band

RESPONSE_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING", "description": "Market trend summary"},
        "suburbs": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "medianPrice": {
                        "type": "NUMBER",
                        "description": "Median sold price in AUD",
                    },
                    "weeklyRent": {
                        "type": "NUMBER",
                        "description": "Median weekly rent in AUD",
                    },
                },
                "required": ["name", "medianPrice", "weeklyRent"],
            },
        },
    },
    "required": ["summary", "suburbs"],
}


def build_generate_url(base_url: str, model_id: str) -> str:
    """Build the generateContent endpoint for a model.

    Example:
        ("https://generativelanguage.googleapis.com", "gemini-2.5-flash")
        -> "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
    """
    return f"{base_url.rstrip('/')}/v1beta/models/{model_id}:generateContent"


def build_prompt(
    location: Location,
    property_type: PropertyType,
    filters: MarketFilters,
    suburb_count: int = 15,
) -> str:
    specs = describe_features(filters)
    kind = property_type.value
    return (
        f"Generate a realistic real estate market dataset for {suburb_count} popular "
        f"suburbs in {location.value}, Australia{describe_price_band(filters)}.\n\n"
        f"Focus specifically on market data for: {kind}s ({specs}).\n\n"
        "For each suburb, provide:\n"
        "1. The suburb name.\n"
        f"2. A realistic current Median Sold Price (in AUD) for a {specs} {kind} "
        "based on recent trends.\n"
        f"3. A realistic current Median Weekly Rent (in AUD) for a {specs} {kind}.\n\n"
        f"Also provide a brief 1-sentence summary of the {kind} market trend in "
        f"{location.value} for this specific configuration.\n"
    )


def build_request_body(
    location: Location,
    property_type: PropertyType,
    filters: MarketFilters,
    suburb_count: int = 15,
) -> dict:
    return {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"text": build_prompt(location, property_type, filters, suburb_count)}
                ],
            }
        ],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }
