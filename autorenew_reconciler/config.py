"""Configuration helpers for the auto-renew reconciler."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

LOGGER = logging.getLogger(__name__)

DEFAULT_DEALS_BASE_URL = "https://api.pipelinedeals.com/api/v3"


class ConfigurationError(RuntimeError):
    """Raised when configuration files or credentials are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load tuning options from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' could not be parsed: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping at the top level")
    return data


def section(config: Mapping[str, Any], name: str) -> Dict[str, Any]:
    """Return a named sub-mapping of the configuration, or an empty one."""

    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
    return value


# --- Credentials ---

@dataclass(frozen=True)
class RegistrarCredentials:
    """API access for the registrar. The client IP must be whitelisted upstream."""

    api_key: str
    api_user: str
    client_ip: str
    username: Optional[str] = None

    @property
    def account(self) -> str:
        return self.username or self.api_user


@dataclass(frozen=True)
class DealCredentials:
    api_key: str
    base_url: str = DEFAULT_DEALS_BASE_URL


@dataclass(frozen=True)
class BrowserCredentials:
    """Dashboard login used by the browser automation."""

    username: str
    password: str


@dataclass(frozen=True)
class Credentials:
    registrar: RegistrarCredentials
    deals: DealCredentials
    browser: Optional[BrowserCredentials] = None


def _require(environ: Mapping[str, str], keys: List[str]) -> None:
    missing = [key for key in keys if not (environ.get(key) or "").strip()]
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")


def credentials_from_env(environ: Mapping[str, str], *, require_browser: bool = True) -> Credentials:
    """Build credential objects from environment variables."""

    required = ["NC_APIKEY", "NC_USER", "NC_IP", "PIPELINE_DEALS_API_KEY"]
    if require_browser:
        required += ["NAMECHEAP_USERNAME", "NAMECHEAP_PASSWORD"]
    _require(environ, required)

    registrar = RegistrarCredentials(
        api_key=environ["NC_APIKEY"].strip(),
        api_user=environ["NC_USER"].strip(),
        client_ip=environ["NC_IP"].strip(),
    )
    deals = DealCredentials(
        api_key=environ["PIPELINE_DEALS_API_KEY"].strip(),
        base_url=(environ.get("PIPELINE_DEALS_API_URL") or DEFAULT_DEALS_BASE_URL).strip().rstrip("/"),
    )

    browser = None
    if environ.get("NAMECHEAP_USERNAME") and environ.get("NAMECHEAP_PASSWORD"):
        browser = BrowserCredentials(
            username=environ["NAMECHEAP_USERNAME"],
            password=environ["NAMECHEAP_PASSWORD"],
        )
    else:
        LOGGER.debug("Browser credentials not configured")

    return Credentials(registrar=registrar, deals=deals, browser=browser)
