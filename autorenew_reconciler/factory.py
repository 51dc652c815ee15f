"""Factory helpers for constructing clients and the orchestrator from configuration."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from .browser import AutoRenewToggler, BrowserConfig
from .clients import DealClient, DealFieldMap, RegistrarClient, RequestPacer, build_session
from .clients.deals import PURCHASED_BY_US
from .clients.registrar import DEFAULT_PAGE_SIZE, LIVE_ENDPOINT, SANDBOX_ENDPOINT
from .config import ConfigurationError, Credentials, section
from .orchestrator import ReconciliationOrchestrator
from .pagination import PageRangePolicy
from .reconcile import DuplicatePolicy

E = TypeVar("E", bound=Enum)


def _enum(enum_cls: Type[E], value: Any, option: str) -> E:
    try:
        return enum_cls(str(value).lower())
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"Invalid value '{value}' for '{option}'. Expected one of: {choices}") from exc


def _session(options: Mapping[str, Any]):
    return build_session(
        timeout_seconds=float(options.get("timeout_seconds", 30.0)),
        max_retries=int(options.get("max_retries", 2)),
    )


def build_registrar_client(config: Mapping[str, Any], credentials: Credentials) -> RegistrarClient:
    options = section(config, "registrar")
    endpoint = options.get("endpoint") or (SANDBOX_ENDPOINT if options.get("sandbox") else LIVE_ENDPOINT)
    return RegistrarClient(
        credentials.registrar,
        endpoint=endpoint,
        page_size=int(options.get("page_size", DEFAULT_PAGE_SIZE)),
        session=_session(options),
        pacer=RequestPacer(options.get("requests_per_minute")),
    )


def build_deal_client(config: Mapping[str, Any], credentials: Credentials) -> DealClient:
    options = section(config, "deals")
    fields: Dict[str, Any] = section(options, "fields")
    try:
        field_map = DealFieldMap(**fields)
    except TypeError as exc:
        raise ConfigurationError(f"Unknown deal field option: {exc}") from exc

    return DealClient(
        credentials.deals,
        field_map=field_map,
        purchased_by_us=int(options.get("purchased_by_us", PURCHASED_BY_US)),
        page_range=_enum(PageRangePolicy, options.get("page_range", PageRangePolicy.EXCLUSIVE.value), "deals.page_range"),
        per_page=options.get("per_page"),
        session=_session(options),
        pacer=RequestPacer(options.get("requests_per_minute")),
    )


def build_toggler(config: Mapping[str, Any], credentials: Credentials) -> AutoRenewToggler:
    if AutoRenewToggler is None:
        raise ConfigurationError("Browser automation requires the 'playwright' package to be installed")
    if credentials.browser is None:
        raise ConfigurationError("NAMECHEAP_USERNAME and NAMECHEAP_PASSWORD are required for browser automation")
    try:
        browser_config = BrowserConfig.from_mapping(section(config, "browser"))
    except (TypeError, KeyError) as exc:
        raise ConfigurationError(f"Invalid browser options: {exc}") from exc
    return AutoRenewToggler(credentials.browser, browser_config)


def build_orchestrator(
    config: Mapping[str, Any],
    credentials: Credentials,
    *,
    dry_run: bool = False,
    reactivate_expired: Optional[bool] = None,
) -> ReconciliationOrchestrator:
    """Assemble an orchestrator for one run."""

    options = section(config, "reconcile")
    if reactivate_expired is None:
        reactivate_expired = bool(options.get("reactivate_expired", False))

    return ReconciliationOrchestrator(
        build_registrar_client(config, credentials),
        build_deal_client(config, credentials),
        None if dry_run else build_toggler(config, credentials),
        duplicates=_enum(DuplicatePolicy, options.get("duplicates", DuplicatePolicy.ALLOW.value), "reconcile.duplicates"),
        reactivate_expired=reactivate_expired,
        reactivation_years=int(options.get("reactivation_years", 1)),
        dry_run=dry_run,
    )
