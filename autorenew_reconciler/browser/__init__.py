"""Browser automation for registrar dashboard tasks that have no API."""

from .base import AutomationError, BrowserConfig, BrowserSession  # noqa: F401

__all__ = ["AutomationError", "BrowserConfig", "BrowserSession"]

try:  # pragma: no cover - optional dependency
    from .auto_renew import AutoRenewToggler  # noqa: F401
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    AutoRenewToggler = None  # type: ignore[assignment,misc]
else:  # pragma: no cover - optional dependency
    __all__ += ["AutoRenewToggler"]
