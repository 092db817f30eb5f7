"""Market data provider package."""

from yieldscope.provider.client import (
    GENERIC_FAILURE,
    MalformedResponseError,
    MarketDataClient,
    MarketDataError,
    MissingCredentialError,
    ProviderTransportError,
    get_client,
)
from yieldscope.provider.parser import parse_generate_response
from yieldscope.provider.prompt import build_generate_url, build_prompt

__all__ = [
    "GENERIC_FAILURE",
    "MalformedResponseError",
    "MarketDataClient",
    "MarketDataError",
    "MissingCredentialError",
    "ProviderTransportError",
    "get_client",
    "parse_generate_response",
    "build_generate_url",
    "build_prompt",
]
