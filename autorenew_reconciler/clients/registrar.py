"""Namecheap client used to list registered domains and reactivate expired ones."""
from __future__ import annotations

import logging
import time
import xml.etree.ElementTree as ET
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import requests

from ..config import RegistrarCredentials
from ..models import FetchResult, PageFailure, ReactivationResult, RegistrarDomain
from ..pagination import PageRangePolicy, page_numbers, total_pages
from .base import NetworkError, PaginatedClient, ParseError, RequestPacer

LOGGER = logging.getLogger(__name__)

LIVE_ENDPOINT = "https://api.namecheap.com/xml.response"
SANDBOX_ENDPOINT = "https://api.sandbox.namecheap.com/xml.response"

LIST_COMMAND = "namecheap.domains.getList"
REACTIVATE_COMMAND = "namecheap.domains.reactivate"
DEFAULT_PAGE_SIZE = 100

_DATE_FORMATS = ("%m/%d/%Y", "%Y-%m-%d")


class RegistrarApiError(ParseError):
    """The registrar answered with ``Status="ERROR"``."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        super().__init__("Registrar API error: " + ("; ".join(self.errors) or "unknown error"))


# ------------------------------------------------------------------
# XML decoding

def _parse_envelope(xml_text: str) -> Tuple[ET.Element, str, List[str]]:
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise ParseError(f"Registrar response is not valid XML: {exc}") from exc

    # Responses are namespaced: xmlns="http://api.namecheap.com/xml.response"
    ns = root.tag.split("}")[0] + "}" if root.tag.startswith("{") else ""
    if root.tag != f"{ns}ApiResponse":
        raise ParseError(f"Unexpected registrar root element '{root.tag}'")

    errors: List[str] = []
    errors_el = root.find(f"{ns}Errors")
    if errors_el is not None:
        for err in errors_el.findall(f"{ns}Error"):
            number = err.attrib.get("Number")
            text = (err.text or "").strip()
            errors.append(f"[{number}] {text}" if number else text)

    if root.attrib.get("Status", "").upper() != "OK":
        raise RegistrarApiError(errors)
    return root, ns, errors


def _child_int(parent: ET.Element, tag: str) -> int:
    element = parent.find(tag)
    if element is None or element.text is None:
        raise ParseError(f"Registrar paging block is missing '{tag.split('}')[-1]}'")
    try:
        return int(element.text.strip())
    except ValueError as exc:
        raise ParseError(f"Registrar paging value '{element.text}' is not an integer") from exc


def parse_domain_list(xml_text: str) -> Dict[str, Any]:
    """Decode a ``domains.getList`` response into paging info and raw domain attributes."""

    root, ns, _ = _parse_envelope(xml_text)
    command = root.find(f"{ns}CommandResponse")
    if command is None:
        raise ParseError("Registrar response has no CommandResponse")

    paging_el = command.find(f"{ns}Paging")
    if paging_el is None:
        raise ParseError("Registrar response has no Paging block")
    paging = {
        "total_items": _child_int(paging_el, f"{ns}TotalItems"),
        "current_page": _child_int(paging_el, f"{ns}CurrentPage"),
        "page_size": _child_int(paging_el, f"{ns}PageSize"),
    }

    result = command.find(f"{ns}DomainGetListResult")
    domains = [dict(el.attrib) for el in result.findall(f"{ns}Domain")] if result is not None else []
    return {"paging": paging, "domains": domains}


def parse_bool(value: Optional[str]) -> bool:
    """Parse the registrar's string booleans (``"True"``/``"false"``) case-insensitively."""

    if value is None or not str(value).strip():
        return False
    text = str(value).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise ParseError(f"Expected 'true' or 'false', got '{value}'")


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value or not str(value).strip():
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(str(value).strip(), fmt).date()
        except ValueError:
            continue
    LOGGER.debug("Unrecognised registrar date '%s'", value)
    return None


def domain_from_attributes(attrs: Mapping[str, Any]) -> RegistrarDomain:
    try:
        domain_id = int(attrs["ID"])
        name = str(attrs["Name"]).strip()
    except (KeyError, TypeError, ValueError) as exc:
        raise ParseError(f"Registrar domain entry is missing a valid ID/Name: {dict(attrs)}") from exc
    if not name:
        raise ParseError(f"Registrar domain {domain_id} has an empty name")

    return RegistrarDomain(
        id=domain_id,
        name=name,
        created_at=parse_date(attrs.get("Created")),
        expires_at=parse_date(attrs.get("Expires")),
        is_expired=parse_bool(attrs.get("IsExpired")),
        is_locked=parse_bool(attrs.get("IsLocked")),
        auto_renew_enabled=parse_bool(attrs.get("AutoRenew")),
        is_premium=parse_bool(attrs.get("IsPremium")),
        whois_guard=attrs.get("WhoisGuard") or None,
        is_our_dns=parse_bool(attrs.get("IsOurDNS")),
    )


def _as_entries(
    value: Union[None, Mapping[str, Any], Iterable[Mapping[str, Any]]],
) -> List[Mapping[str, Any]]:
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [value]
    return list(value)


def domains_from_payload(
    value: Union[None, Mapping[str, Any], Iterable[Mapping[str, Any]]],
) -> List[RegistrarDomain]:
    """Translate the per-domain field of a page into domain records.

    The field holds a list of mappings, or a bare mapping when the page
    contains exactly one domain. Both shapes yield a sequence.
    """

    return [domain_from_attributes(item) for item in _as_entries(value)]


# ------------------------------------------------------------------
# Client

class RegistrarClient(PaginatedClient):
    """Fetch the complete domain directory for one Namecheap account."""

    source = "registrar"

    def __init__(
        self,
        credentials: RegistrarCredentials,
        *,
        endpoint: str = LIVE_ENDPOINT,
        page_size: int = DEFAULT_PAGE_SIZE,
        session: Optional[requests.Session] = None,
        pacer: Optional[RequestPacer] = None,
    ) -> None:
        super().__init__(session=session, pacer=pacer)
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.credentials = credentials
        self.endpoint = endpoint
        self.page_size = page_size

    def _params(self, command: str, **extra: Any) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "ApiUser": self.credentials.api_user,
            "ApiKey": self.credentials.api_key,
            "UserName": self.credentials.account,
            "ClientIp": self.credentials.client_ip,
            "Command": command,
        }
        params.update(extra)
        return params

    def _request_page(self, page: Optional[int] = None) -> Dict[str, Any]:
        extra: Dict[str, Any] = {"PageSize": self.page_size}
        if page is not None:
            extra["Page"] = page
        response = self._get(self.endpoint, self._params(LIST_COMMAND, **extra))
        return parse_domain_list(response.text)

    def fetch_all_domains(self) -> FetchResult[RegistrarDomain]:
        """Fetch every page of the domain list.

        The sizing request must succeed; afterwards a page that fails is logged,
        recorded on the result, and left out. A single malformed domain entry
        is excluded and counted without dropping the rest of its page.
        """

        paging = self._request_page()["paging"]
        pages = total_pages(paging["total_items"], paging["page_size"] or self.page_size)
        LOGGER.info("Registrar reports %s domains across %s page(s)", paging["total_items"], pages)

        domains: List[RegistrarDomain] = []
        failures: List[PageFailure] = []
        excluded = 0
        for page in page_numbers(pages, PageRangePolicy.INCLUSIVE):
            LOGGER.info("Fetching domains (page %s of %s)", page, pages)
            try:
                entries = _as_entries(self._request_page(page)["domains"])
            except (NetworkError, ParseError) as exc:
                self._record_failure(failures, page, exc)
                continue

            for attrs in entries:
                try:
                    domains.append(domain_from_attributes(attrs))
                except ParseError as exc:
                    LOGGER.warning("Skipping registrar entry on page %s: %s", page, exc)
                    excluded += 1

        LOGGER.info("Domains fetched: %s (excluded %s)", len(domains), excluded)
        return FetchResult(items=domains, skipped_pages=failures, excluded_records=excluded, total_pages=pages)

    def reactivate_domain(self, domain_name: str, years: int = 1) -> ReactivationResult:
        """Renew an expired domain through the API."""

        params = self._params(
            REACTIVATE_COMMAND,
            DomainName=domain_name,
            YearsToAdd=years,
            IsPremiumDomain="false",
        )
        try:
            response = self._get(self.endpoint, params)
            root, ns, errors = _parse_envelope(response.text)
            result = root.find(f"{ns}CommandResponse/{ns}DomainReactivateResult")
            success = not errors
            if result is not None and "IsSuccess" in result.attrib:
                success = success and parse_bool(result.attrib["IsSuccess"])
        except RegistrarApiError as exc:
            LOGGER.warning("Reactivation of %s rejected: %s", domain_name, exc)
            return ReactivationResult(domain_name=domain_name, success=False, errors=exc.errors)
        except (NetworkError, ParseError) as exc:
            LOGGER.warning("Reactivation of %s failed: %s", domain_name, exc)
            return ReactivationResult(domain_name=domain_name, success=False, errors=[str(exc)])

        return ReactivationResult(domain_name=domain_name, success=success, errors=errors)

    def reactivate_domains(self, domain_names: Sequence[str], years: int = 1) -> List[ReactivationResult]:
        started = time.monotonic()
        results: List[ReactivationResult] = []
        for index, name in enumerate(domain_names, start=1):
            LOGGER.info("Reactivating domains: %s (%s of %s)", name, index, len(domain_names))
            results.append(self.reactivate_domain(name, years=years))
        reactivated = sum(1 for result in results if result.success)
        LOGGER.info("Reactivated %s of %s domain(s) in %.2f seconds", reactivated, len(results), time.monotonic() - started)
        return results
