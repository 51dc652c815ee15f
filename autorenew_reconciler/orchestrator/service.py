"""Run orchestrator that fetches both directories, reconciles them, and applies the result."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from ..models import (
    AutomationReport,
    DealRecord,
    FetchResult,
    PageFailure,
    ReactivationResult,
    ReconciliationAction,
    RegistrarDomain,
)
from ..reconcile import DuplicatePolicy, partition_actions, plan_actions

LOGGER = logging.getLogger(__name__)


class RegistrarProtocol(Protocol):
    def fetch_all_domains(self) -> FetchResult[RegistrarDomain]:  # pragma: no cover - runtime protocol
        """Return every registered domain."""

    def reactivate_domains(self, domain_names: Sequence[str], years: int = 1) -> List[ReactivationResult]:  # pragma: no cover
        """Renew expired domains."""


class DealSourceProtocol(Protocol):
    def fetch_qualifying_deals(self) -> FetchResult[DealRecord]:  # pragma: no cover - runtime protocol
        """Return deals eligible for auto-renew."""


class TogglerProtocol(Protocol):
    def run_auto_renew_toggle(self, domains: Sequence[str]) -> AutomationReport:  # pragma: no cover
        """Enable auto-renew for the given domains."""


@dataclass
class RunSummary:
    """Everything a single reconciliation run found and did."""

    domains_fetched: int = 0
    domains_excluded: int = 0
    deals_qualifying: int = 0
    deals_excluded: int = 0
    actions: List[ReconciliationAction] = field(default_factory=list)
    toggle: List[str] = field(default_factory=list)
    reactivate: List[str] = field(default_factory=list)
    skipped_pages: List[PageFailure] = field(default_factory=list)
    automation: Optional[AutomationReport] = None
    reactivations: List[ReactivationResult] = field(default_factory=list)
    dry_run: bool = False
    elapsed_seconds: float = 0.0

    @property
    def degraded(self) -> bool:
        """True when pages were dropped, so some domains or deals may be missing."""

        return bool(self.skipped_pages)

    def lines(self) -> List[str]:
        lines = [
            f"Domains fetched: {self.domains_fetched} (excluded {self.domains_excluded})",
            f"Qualifying deals: {self.deals_qualifying} (excluded {self.deals_excluded})",
            f"Domains to toggle: {len(self.toggle)}",
            f"Expired domains to reactivate: {len(self.reactivate)}",
        ]
        if self.skipped_pages:
            lines.append(f"Skipped pages: {len(self.skipped_pages)}")
            lines.extend(f"  {failure}" for failure in self.skipped_pages)
        if self.dry_run:
            lines.append("Dry run: no changes were made")
        if self.automation is not None:
            if self.automation.completed:
                lines.append(f"Auto-renew enabled: {len(self.automation.succeeded)} of {len(self.automation.requested)}")
            else:
                lines.append(f"Browser automation aborted: {self.automation.error}")
        if self.reactivations:
            reactivated = sum(1 for result in self.reactivations if result.success)
            lines.append(f"Reactivated: {reactivated} of {len(self.reactivations)}")
        lines.append(f"Finished in {self.elapsed_seconds:.2f} seconds")
        return lines


class ReconciliationOrchestrator:
    """Fetches the registrar and CRM directories in sequence and acts on the differences."""

    def __init__(
        self,
        registrar: RegistrarProtocol,
        deals: DealSourceProtocol,
        toggler: Optional[TogglerProtocol] = None,
        *,
        duplicates: DuplicatePolicy = DuplicatePolicy.ALLOW,
        reactivate_expired: bool = False,
        reactivation_years: int = 1,
        dry_run: bool = False,
    ) -> None:
        self._registrar = registrar
        self._deals = deals
        self._toggler = toggler
        self._duplicates = duplicates
        self._reactivate_expired = reactivate_expired
        self._reactivation_years = reactivation_years
        self._dry_run = dry_run

    def run(self) -> RunSummary:
        started = time.monotonic()
        domains = self._registrar.fetch_all_domains()
        deals = self._deals.fetch_qualifying_deals()

        LOGGER.info("Performing auto-renew check")
        actions = plan_actions(deals.items, domains.items, self._duplicates)
        toggle, reactivate = partition_actions(actions)
        for action in actions:
            LOGGER.debug("Planned %s for %s (%s)", action.action_kind.value, action.domain_name, action.company_name)

        summary = RunSummary(
            domains_fetched=len(domains),
            domains_excluded=domains.excluded_records,
            deals_qualifying=len(deals),
            deals_excluded=deals.excluded_records,
            actions=actions,
            toggle=toggle,
            reactivate=reactivate,
            skipped_pages=[*domains.skipped_pages, *deals.skipped_pages],
            dry_run=self._dry_run,
        )
        if summary.degraded:
            LOGGER.warning("%s page(s) were skipped; results may be incomplete", len(summary.skipped_pages))

        if not self._dry_run:
            self._apply(summary)

        summary.elapsed_seconds = time.monotonic() - started
        return summary

    def _apply(self, summary: RunSummary) -> None:
        if summary.toggle:
            if self._toggler is None:
                LOGGER.warning("No browser automation configured; %s domain(s) left untoggled", len(summary.toggle))
            else:
                LOGGER.info("Running browser for %s domain(s)", len(summary.toggle))
                summary.automation = self._toggler.run_auto_renew_toggle(summary.toggle)
        else:
            LOGGER.info("No domains need auto-renew toggled")

        if summary.reactivate:
            if self._reactivate_expired:
                summary.reactivations = self._registrar.reactivate_domains(
                    summary.reactivate, years=self._reactivation_years
                )
            else:
                LOGGER.info("%s expired domain(s) left for manual reactivation", len(summary.reactivate))
