"""Persisted dark/light theme preference."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class ThemeStore:
    """Reads the saved theme once and writes it back on every toggle.

    With no saved preference the ambient platform preference is used.
    """

    def __init__(self, path: Path, prefers_dark: bool = False):
        self._path = Path(path)
        self._dark = self._load(prefers_dark)

    @property
    def dark_mode(self) -> bool:
        return self._dark

    def _load(self, fallback: bool) -> bool:
        try:
            data = json.loads(self._path.read_text())
        except FileNotFoundError:
            return fallback
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable preferences at %s: %s", self._path, exc)
            return fallback
        theme = data.get("theme") if isinstance(data, dict) else None
        if theme not in ("dark", "light"):
            return fallback
        return theme == "dark"

    def set_dark_mode(self, dark: bool) -> bool:
        self._dark = dark
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps({"theme": "dark" if dark else "light"}))
        return self._dark

    def toggle(self) -> bool:
        return self.set_dark_mode(not self._dark)
