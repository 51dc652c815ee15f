"""Match qualifying deals against the registrar directory and decide what to do with each domain."""
from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Sequence, Tuple

from .models import ActionKind, DealRecord, ReconciliationAction, RegistrarDomain


class DuplicatePolicy(str, Enum):
    """How to treat a domain referenced by more than one qualifying deal.

    ``ALLOW`` emits one action per deal, so the domain can be listed twice.
    ``DEDUPE`` keeps only the action from the first deal.
    """

    ALLOW = "allow"
    DEDUPE = "dedupe"


def _index_actionable(domains: Iterable[RegistrarDomain]) -> Dict[str, RegistrarDomain]:
    index: Dict[str, RegistrarDomain] = {}
    for domain in domains:
        if domain.needs_action and domain.name not in index:
            index[domain.name] = domain
    return index


def plan_actions(
    deals: Iterable[DealRecord],
    domains: Iterable[RegistrarDomain],
    duplicates: DuplicatePolicy = DuplicatePolicy.ALLOW,
) -> List[ReconciliationAction]:
    """Build one action per deal whose domain is registered and not safely auto-renewing.

    Names are compared exactly (case-sensitive). Actions keep deal order.
    """

    actionable = _index_actionable(domains)
    seen: set[str] = set()
    actions: List[ReconciliationAction] = []

    for deal in deals:
        domain = actionable.get(deal.domain_name)
        if domain is None:
            continue
        if duplicates is DuplicatePolicy.DEDUPE:
            if domain.name in seen:
                continue
            seen.add(domain.name)

        actions.append(
            ReconciliationAction(
                domain_name=domain.name,
                company_name=deal.company_name,
                deal_status=deal.status,
                current_auto_renew=domain.auto_renew_enabled,
                currently_expired=domain.is_expired,
                action_kind=ActionKind.REACTIVATE_EXPIRED if domain.is_expired else ActionKind.TOGGLE_AUTO_RENEW,
            )
        )
    return actions


def partition_actions(actions: Sequence[ReconciliationAction]) -> Tuple[List[str], List[str]]:
    """Split actions into ``(toggle, reactivate)`` domain name lists."""

    toggle: List[str] = []
    reactivate: List[str] = []
    for action in actions:
        if action.currently_expired:
            reactivate.append(action.domain_name)
        else:
            toggle.append(action.domain_name)
    return toggle, reactivate


def reconcile(
    deals: Iterable[DealRecord],
    domains: Iterable[RegistrarDomain],
    duplicates: DuplicatePolicy = DuplicatePolicy.ALLOW,
) -> Tuple[List[str], List[str]]:
    """Return the domains to toggle via the dashboard and the domains to reactivate via the API."""

    return partition_actions(plan_actions(deals, domains, duplicates))
