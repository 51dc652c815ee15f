"""End-to-end tests for :class:`ReconciliationOrchestrator`."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pytest

from autorenew_reconciler.clients import DealClient, RegistrarClient
from autorenew_reconciler.config import DealCredentials, RegistrarCredentials
from autorenew_reconciler.models import (
    AutomationReport,
    DealRecord,
    DealStatus,
    FetchResult,
    PageFailure,
    ReactivationResult,
    RegistrarDomain,
)
from autorenew_reconciler.orchestrator import ReconciliationOrchestrator
from autorenew_reconciler.reconcile import DuplicatePolicy

NS = "http://api.namecheap.com/xml.response"
REGISTRAR_URL = "https://api.sandbox.namecheap.com/xml.response"
DEALS_URL = "https://deals.example.test/api/v3"
EXPIRED_SUFFIX = "7.com"
AUTO_RENEW_SUFFIX = "5.com"


class FakeResponse:
    def __init__(self, text: str = "", payload: Any = None) -> None:
        self.text = text
        self._payload = payload
        self.status_code = 200

    def raise_for_status(self) -> None:
        return None

    def json(self) -> Any:
        return self._payload


class FakeBackend:
    """Serves a 150-domain registrar account and a two-page deal listing."""

    def __init__(self, registrar_total: int = 150, deal_pages: Optional[Dict[int, List[Dict[str, Any]]]] = None) -> None:
        self.registrar_names = [f"client{index:03d}.com" for index in range(registrar_total)]
        self.deal_pages = deal_pages or {}
        self.deal_pages_requested: List[int] = []

    def get(self, url: str, params: Optional[Dict[str, object]] = None) -> FakeResponse:
        params = dict(params or {})
        if url.startswith(REGISTRAR_URL):
            return FakeResponse(text=self._registrar_page(int(params.get("Page", 1))))
        page = int(params.get("page", 1))
        if "page" in params:
            self.deal_pages_requested.append(page)
        return FakeResponse(
            payload={"pagination": {"pages": len(self.deal_pages)}, "entries": self.deal_pages.get(page, [])}
        )

    def _registrar_page(self, page: int) -> str:
        chunk = self.registrar_names[(page - 1) * 100 : page * 100]
        items = "".join(
            f'<Domain ID="{index}" Name="{name}" IsExpired="{name.endswith(EXPIRED_SUFFIX)}" IsLocked="False" '
            f'AutoRenew="{name.endswith(AUTO_RENEW_SUFFIX)}" IsPremium="false" />'
            for index, name in enumerate(chunk, start=(page - 1) * 100)
        )
        return (
            f'<ApiResponse Status="OK" xmlns="{NS}"><Errors />'
            f"<CommandResponse><DomainGetListResult>{items}</DomainGetListResult>"
            f"<Paging><TotalItems>{len(self.registrar_names)}</TotalItems><CurrentPage>{page}</CurrentPage>"
            "<PageSize>100</PageSize></Paging></CommandResponse></ApiResponse>"
        )


def _deal_entry(deal_id: int, domain: str, status: int = 3) -> Dict[str, Any]:
    return {
        "id": deal_id,
        "status": status,
        "company": {"id": deal_id, "name": f"Company {deal_id}"},
        "custom_fields": {
            "custom_label_1454434": domain,
            "custom_label_1457620": 1936195,
            "custom_label_2154033": 1561939200,
        },
    }


class RecordingToggler:
    def __init__(self) -> None:
        self.calls: List[List[str]] = []

    def run_auto_renew_toggle(self, domains: Sequence[str]) -> AutomationReport:
        self.calls.append(list(domains))
        return AutomationReport(requested=list(domains), failed=list(domains[-1:]))


def _clients(backend: FakeBackend):
    registrar = RegistrarClient(
        RegistrarCredentials(api_key="k", api_user="u", client_ip="198.51.100.1"),
        endpoint=REGISTRAR_URL,
        session=backend,
    )
    deals = DealClient(DealCredentials(api_key="d", base_url=DEALS_URL), session=backend)
    return registrar, deals


def test_end_to_end_run_uses_only_fetched_pages() -> None:
    backend = FakeBackend(
        deal_pages={
            1: [
                _deal_entry(1, "client010.com"),
                _deal_entry(2, "client125.com"),  # already auto-renewing
                _deal_entry(3, "client137.com"),  # expired
                _deal_entry(4, "client140.com", status=1),
                _deal_entry(5, "not-ours.com"),
                _deal_entry(6, "client149.com"),
            ],
            2: [_deal_entry(7, "client011.com")],
        }
    )
    registrar, deals = _clients(backend)
    toggler = RecordingToggler()

    summary = ReconciliationOrchestrator(registrar, deals, toggler).run()

    assert summary.domains_fetched == 150
    assert summary.deals_qualifying == 5
    assert summary.deals_excluded == 1
    assert backend.deal_pages_requested == [1]
    assert summary.toggle == ["client010.com", "client149.com"]
    assert summary.reactivate == ["client137.com"]
    assert toggler.calls == [["client010.com", "client149.com"]]
    assert summary.automation is not None and summary.automation.succeeded == ["client010.com"]
    assert summary.reactivations == []
    assert not summary.degraded


def test_run_with_no_actions_does_not_open_browser() -> None:
    backend = FakeBackend(deal_pages={1: [_deal_entry(1, "client005.com")], 2: []})
    registrar, deals = _clients(backend)
    toggler = RecordingToggler()

    summary = ReconciliationOrchestrator(registrar, deals, toggler).run()

    assert summary.toggle == [] and summary.reactivate == []
    assert toggler.calls == []
    assert summary.automation is None
    assert any("Domains to toggle: 0" in line for line in summary.lines())


class StubRegistrar:
    def __init__(self, domains: List[RegistrarDomain], skipped: Optional[List[PageFailure]] = None) -> None:
        self._result = FetchResult(items=domains, skipped_pages=skipped or [])
        self.reactivated: List[str] = []

    def fetch_all_domains(self) -> FetchResult[RegistrarDomain]:
        return self._result

    def reactivate_domains(self, domain_names: Sequence[str], years: int = 1) -> List[ReactivationResult]:
        self.reactivated.extend(domain_names)
        return [ReactivationResult(domain_name=name, success=True) for name in domain_names]


class StubDeals:
    def __init__(self, deals: List[DealRecord]) -> None:
        self._result = FetchResult(items=deals, excluded_records=2)

    def fetch_qualifying_deals(self) -> FetchResult[DealRecord]:
        return self._result


def _deal(domain: str) -> DealRecord:
    return DealRecord(
        deal_id=1,
        domain_name=domain,
        company_id=None,
        company_name="Acme",
        purchase_channel_code=1936195,
        purchase_confirmed_date="x",
        status=DealStatus.GREEN,
    )


@pytest.fixture
def stubs():
    registrar = StubRegistrar(
        [
            RegistrarDomain(id=1, name="a.com"),
            RegistrarDomain(id=2, name="b.com", is_expired=True),
        ],
        skipped=[PageFailure(source="registrar", page=3, kind="network", message="timeout")],
    )
    deals = StubDeals([_deal("a.com"), _deal("b.com"), _deal("a.com")])
    return registrar, deals


def test_dry_run_makes_no_changes(stubs) -> None:
    registrar, deals = stubs
    toggler = RecordingToggler()

    summary = ReconciliationOrchestrator(registrar, deals, toggler, dry_run=True, reactivate_expired=True).run()

    assert summary.toggle == ["a.com", "a.com"]
    assert summary.reactivate == ["b.com"]
    assert toggler.calls == []
    assert registrar.reactivated == []
    assert "Dry run: no changes were made" in summary.lines()


def test_reactivation_only_runs_when_enabled(stubs) -> None:
    registrar, deals = stubs

    ReconciliationOrchestrator(registrar, deals, RecordingToggler()).run()
    assert registrar.reactivated == []

    summary = ReconciliationOrchestrator(
        registrar, deals, RecordingToggler(), reactivate_expired=True, duplicates=DuplicatePolicy.DEDUPE
    ).run()
    assert registrar.reactivated == ["b.com"]
    assert summary.toggle == ["a.com"]
    assert "Reactivated: 1 of 1" in summary.lines()


def test_skipped_pages_are_surfaced(stubs) -> None:
    registrar, deals = stubs

    summary = ReconciliationOrchestrator(registrar, deals, None).run()

    assert summary.degraded
    assert summary.deals_excluded == 2
    assert summary.automation is None
    assert "  registrar page 3 (network): timeout" in summary.lines()
