"""Configuration for the Yieldscope dashboard."""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class YieldscopeConfig(BaseSettings):
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("YIELDSCOPE_API_KEY", "GEMINI_API_KEY", "API_KEY"),
    )
    model_id: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com"
    timeout_seconds: float = 60.0
    impersonate_browser: str | None = None
    suburb_count: int = 15
    debounce_seconds: float = 0.8
    cache_ttl_seconds: int = 300
    cache_max_entries: int = 200
    client_price_filter: bool = True
    preferences_path: Path = Path.home() / ".yieldscope" / "preferences.json"
    prefers_dark: bool = False

    model_config = {"env_prefix": "YIELDSCOPE_", "populate_by_name": True}
