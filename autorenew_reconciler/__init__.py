"""Top-level package for reconciling registrar auto-renew flags with CRM deals."""

from . import models  # noqa: F401
from .models import (
    ActionKind,
    AutomationReport,
    DealRecord,
    DealStatus,
    FetchResult,
    PageFailure,
    ReactivationResult,
    ReconciliationAction,
    RegistrarDomain,
)
from .pagination import PageRangePolicy, page_numbers, total_pages
from .reconcile import DuplicatePolicy, partition_actions, plan_actions, reconcile

__all__ = [
    "ActionKind",
    "AutomationReport",
    "DealRecord",
    "DealStatus",
    "DuplicatePolicy",
    "FetchResult",
    "PageFailure",
    "PageRangePolicy",
    "ReactivationResult",
    "ReconciliationAction",
    "RegistrarDomain",
    "page_numbers",
    "partition_actions",
    "plan_actions",
    "reconcile",
    "total_pages",
    "browser",
    "clients",
    "orchestrator",
]
