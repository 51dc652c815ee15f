"""PipelineDeals client that collects deals whose domains we purchased."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import requests

from ..config import DealCredentials
from ..models import DealRecord, DealStatus, FetchResult, PageFailure
from ..pagination import PageRangePolicy, page_numbers
from .base import NetworkError, PaginatedClient, ParseError, RequestPacer

LOGGER = logging.getLogger(__name__)

DEALS_SLUG = "deals.json"
# Value of the purchase channel field meaning "domain purchased through us".
PURCHASED_BY_US = 1936195


@dataclass(frozen=True)
class DealFieldMap:
    """Identifiers of the account's custom deal fields."""

    domain: str = "custom_label_1454434"
    purchase_channel: str = "custom_label_1457620"
    purchase_date: str = "custom_label_2154033"


def _status(value: Any) -> Optional[DealStatus]:
    try:
        return DealStatus(int(value))
    except (TypeError, ValueError):
        return None


def _optional_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def deal_from_entry(
    entry: Mapping[str, Any],
    field_map: DealFieldMap = DealFieldMap(),
    purchased_by_us: int = PURCHASED_BY_US,
) -> Optional[DealRecord]:
    """Translate a raw deal entry, returning ``None`` when it does not qualify.

    A deal qualifies when it is not red, names a domain, was purchased through
    us and has a confirmed purchase date.
    """

    status = _status(entry.get("status"))
    if status is DealStatus.RED:
        return None

    custom_fields = entry.get("custom_fields") or {}
    if not isinstance(custom_fields, Mapping):
        return None

    domain = custom_fields.get(field_map.domain)
    if domain is None or not str(domain).strip():
        return None

    channel = custom_fields.get(field_map.purchase_channel)
    if isinstance(channel, bool) or channel != purchased_by_us:
        return None

    purchased_on = custom_fields.get(field_map.purchase_date)
    if purchased_on is None:
        return None

    company = entry.get("company") or {}
    if not isinstance(company, Mapping):
        company = {}

    return DealRecord(
        deal_id=_optional_int(entry.get("id")),
        domain_name=str(domain).strip(),
        company_id=_optional_int(company.get("id") or entry.get("company_id")),
        company_name=company.get("name") or entry.get("company_name") or None,
        purchase_channel_code=channel,
        purchase_confirmed_date=str(purchased_on),
        status=status,
    )


class DealClient(PaginatedClient):
    """Walk the deal listing and keep only qualifying deals."""

    source = "deals"

    def __init__(
        self,
        credentials: DealCredentials,
        *,
        field_map: Optional[DealFieldMap] = None,
        purchased_by_us: int = PURCHASED_BY_US,
        page_range: PageRangePolicy = PageRangePolicy.EXCLUSIVE,
        per_page: Optional[int] = None,
        session: Optional[requests.Session] = None,
        pacer: Optional[RequestPacer] = None,
    ) -> None:
        super().__init__(session=session, pacer=pacer)
        self.credentials = credentials
        self.field_map = field_map or DealFieldMap()
        self.purchased_by_us = purchased_by_us
        self.page_range = page_range
        self.per_page = per_page

    @property
    def url(self) -> str:
        return f"{self.credentials.base_url.rstrip('/')}/{DEALS_SLUG}"

    def _request_page(self, page: Optional[int] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"api_key": self.credentials.api_key}
        if page is not None:
            params["page"] = page
        if self.per_page:
            params["per_page"] = self.per_page
        response = self._get(self.url, params)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ParseError(f"Deal listing page {page or 1} is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise ParseError(f"Deal listing page {page or 1} is not a JSON object")
        return payload

    def _page_count(self) -> int:
        payload = self._request_page()
        try:
            return int(payload["pagination"]["pages"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ParseError("Deal listing has no usable pagination.pages value") from exc

    def fetch_qualifying_deals(self) -> FetchResult[DealRecord]:
        """Collect qualifying deals from every page selected by the page range policy."""

        pages = self._page_count()
        selected = page_numbers(pages, self.page_range)
        LOGGER.info(
            "Deal listing reports %s page(s); fetching %s (%s range)",
            pages,
            len(selected),
            self.page_range.value,
        )

        deals: List[DealRecord] = []
        failures: List[PageFailure] = []
        excluded = 0
        for page in selected:
            LOGGER.info("Fetching and filtering deals (page %s of %s)", page, pages)
            try:
                entries = self._request_page(page).get("entries")
                if not isinstance(entries, list):
                    raise ParseError(f"Deal listing page {page} has no entries list")
            except (NetworkError, ParseError) as exc:
                self._record_failure(failures, page, exc)
                continue

            for entry in entries:
                record = deal_from_entry(entry, self.field_map, self.purchased_by_us) if isinstance(entry, Mapping) else None
                if record is None:
                    excluded += 1
                    continue
                deals.append(record)

        LOGGER.info("Qualifying deals: %s (excluded %s)", len(deals), excluded)
        return FetchResult(items=deals, skipped_pages=failures, excluded_records=excluded, total_pages=pages)
