"""Runtime options shared by browser automation sessions."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class AutomationError(RuntimeError):
    """Raised when a browser session cannot be established or driven at all."""


@dataclass
class BrowserConfig:
    """Launch and pacing options for the Chromium session."""

    headless: bool = True
    throttle_seconds: float = 0.0
    navigation_timeout: float = 30.0
    action_timeout: float = 15.0
    slow_mo: float = 0.0
    viewport: Dict[str, int] = field(default_factory=lambda: {"width": 1200, "height": 1000})

    @classmethod
    def from_mapping(cls, options: Optional[Dict[str, Any]]) -> "BrowserConfig":
        options = dict(options or {})
        viewport = options.pop("viewport", None)
        config = cls(**options)
        if viewport:
            config.viewport = {"width": int(viewport["width"]), "height": int(viewport["height"])}
        return config


class BrowserSession:
    """Base class exposing throttling helpers for dashboard automation."""

    def __init__(self, config: Optional[BrowserConfig] = None) -> None:
        self.config = config or BrowserConfig()

    def _apply_throttle(self) -> None:
        if self.config.throttle_seconds > 0:
            time.sleep(self.config.throttle_seconds)
