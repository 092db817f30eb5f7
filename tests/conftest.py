"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass

import pytest

from yieldscope.config import YieldscopeConfig
from yieldscope.models import (
    Location,
    MarketAnalysis,
    MarketFilters,
    PropertyType,
    ProviderPayload,
)
from yieldscope.provider.client import MissingCredentialError
from yieldscope.view import build_market_analysis


@dataclass
class MockResponse:
    """Lightweight mock for curl_cffi response objects."""

    status_code: int
    text: str = ""


def make_envelope(document: dict) -> dict:
    """Wrap a generated JSON document in a generateContent response envelope."""
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": json.dumps(document)}]}}
        ]
    }


def make_payload(*suburbs: tuple[str, float, float], summary: str = "Steady market.") -> dict:
    return {
        "summary": summary,
        "suburbs": [
            {"name": name, "medianPrice": price, "weeklyRent": rent}
            for name, price, rent in suburbs
        ],
    }


def make_analysis(
    *suburbs: tuple[str, float, float],
    location: Location = Location.MELBOURNE,
    property_type: PropertyType = PropertyType.HOUSE,
    summary: str = "Steady market.",
) -> MarketAnalysis:
    payload = ProviderPayload.model_validate(make_payload(*suburbs, summary=summary))
    return build_market_analysis(location, property_type, payload)


class FakeProvider:
    """Provider double whose responses are resolved by the test.

    With ``auto`` set, every call resolves immediately with that analysis.
    """

    def __init__(self, has_key: bool = True, auto: MarketAnalysis | None = None):
        self.has_key = has_key
        self.auto = auto
        self.calls: list[tuple[Location, PropertyType, MarketFilters, bool]] = []
        self.pending: list[asyncio.Future] = []

    def check_credentials(self) -> None:
        if not self.has_key:
            raise MissingCredentialError("Missing API key. Set YIELDSCOPE_API_KEY.")

    async def fetch_market_data(self, location, property_type, filters, use_cache=True):
        self.calls.append((location, property_type, filters, use_cache))
        if self.auto is not None:
            return self.auto
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Keep real credentials and the user's preferences file out of tests."""
    for name in ("YIELDSCOPE_API_KEY", "GEMINI_API_KEY", "API_KEY", "YIELDSCOPE_PREFERS_DARK"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("YIELDSCOPE_PREFERENCES_PATH", str(tmp_path / "preferences.json"))


@pytest.fixture
def fast_config(tmp_path) -> YieldscopeConfig:
    return YieldscopeConfig(
        api_key="test-key",
        debounce_seconds=0.05,
        preferences_path=tmp_path / "prefs.json",
    )
