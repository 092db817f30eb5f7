"""Async client for the generative market data provider."""

import json
import logging

from curl_cffi.requests import AsyncSession, RequestsError

from yieldscope.cache import TTLCache
from yieldscope.config import YieldscopeConfig
from yieldscope.models import Location, MarketAnalysis, MarketFilters, MarketRequest, PropertyType
from yieldscope.provider.parser import ResponseFormatError, parse_generate_response
from yieldscope.provider.prompt import build_generate_url, build_request_body
from yieldscope.view import build_market_analysis

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to fetch market data. Please check your API Key."


class MarketDataError(Exception):
    """Base exception for market data provider errors."""


class MissingCredentialError(MarketDataError):
    """Raised before any request when no API key is configured."""


class ProviderTransportError(MarketDataError):
    """Raised when the provider call fails, times out, or returns non-200."""


class MalformedResponseError(MarketDataError):
    """Raised when the provider answers but the payload lacks required fields."""


class MarketDataClient:
    """Fetches AI-generated suburb estimates and caches successful analyses."""

    def __init__(
        self,
        config: YieldscopeConfig | None = None,
        cache: TTLCache | None = None,
    ):
        self._config = config or YieldscopeConfig()
        self._cache = cache or TTLCache(
            ttl_seconds=self._config.cache_ttl_seconds,
            max_entries=self._config.cache_max_entries,
        )
        self._session: AsyncSession | None = None

    @property
    def config(self) -> YieldscopeConfig:
        return self._config

    def check_credentials(self) -> None:
        if not self._config.api_key:
            raise MissingCredentialError(
                "Missing API key. Set YIELDSCOPE_API_KEY (or GEMINI_API_KEY)."
            )

    def _get_session(self) -> AsyncSession:
        if self._session is None:
            self._session = AsyncSession(
                impersonate=self._config.impersonate_browser,
                timeout=self._config.timeout_seconds,
            )
        return self._session

    async def fetch_market_data(
        self,
        location: Location,
        property_type: PropertyType,
        filters: MarketFilters,
        use_cache: bool = True,
    ) -> MarketAnalysis:
        self.check_credentials()

        key = MarketRequest(
            location=location, property_type=property_type, filters=filters
        ).cache_key
        if use_cache:
            cached = self._cache.get(key)
            if cached is not None:
                logger.info("Cache hit for %s %s", location.value, property_type.value)
                return cached

        envelope = await self._post(location, property_type, filters)
        try:
            payload = parse_generate_response(envelope)
        except ResponseFormatError as exc:
            logger.error("Malformed provider response: %s", exc)
            raise MalformedResponseError(str(exc)) from exc

        analysis = build_market_analysis(location, property_type, payload)
        self._cache.set(key, analysis)
        return analysis

    async def _post(
        self, location: Location, property_type: PropertyType, filters: MarketFilters
    ) -> dict:
        url = build_generate_url(self._config.base_url, self._config.model_id)
        body = build_request_body(
            location, property_type, filters, self._config.suburb_count
        )
        logger.info(
            "Requesting %s estimates for %s (%s)",
            property_type.value,
            location.value,
            filters.model_dump(exclude_none=True),
        )
        try:
            response = await self._get_session().post(
                url,
                json=body,
                headers={
                    "x-goog-api-key": self._config.api_key,
                    "Content-Type": "application/json",
                },
            )
        except RequestsError as exc:
            logger.error("Provider request failed: %s", exc)
            raise ProviderTransportError(GENERIC_FAILURE) from exc

        if response.status_code != 200:
            logger.error(
                "Provider returned %s: %s", response.status_code, response.text[:500]
            )
            raise ProviderTransportError(GENERIC_FAILURE)

        try:
            envelope = json.loads(response.text)
        except json.JSONDecodeError as exc:
            logger.error("Provider envelope was not JSON: %s", exc)
            raise MalformedResponseError("Provider returned a non-JSON response") from exc
        if not isinstance(envelope, dict):
            raise MalformedResponseError("Provider returned an unexpected response envelope")
        return envelope

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "MarketDataClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


_singleton: MarketDataClient | None = None


def get_client() -> MarketDataClient:
    """Return a module-level singleton MarketDataClient."""
    global _singleton
    if _singleton is None:
        _singleton = MarketDataClient()
    return _singleton
