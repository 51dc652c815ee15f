"""Data models shared by the directory clients, the reconciler, and the automation delegate."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


# --- Registrar ---

@dataclass(frozen=True, slots=True)
class RegistrarDomain:
    """Snapshot of a single registered domain as reported by the registrar."""

    id: int
    name: str
    created_at: Optional[date] = None
    expires_at: Optional[date] = None
    is_expired: bool = False
    is_locked: bool = False
    auto_renew_enabled: bool = False
    is_premium: bool = False
    whois_guard: Optional[str] = None
    is_our_dns: bool = False

    @property
    def needs_action(self) -> bool:
        """Domains that already auto-renew and have not lapsed require nothing."""

        return not self.auto_renew_enabled or self.is_expired


# --- CRM ---

class DealStatus(IntEnum):
    """Red/yellow/green traffic light attached to every deal."""

    RED = 1
    YELLOW = 2
    GREEN = 3


@dataclass(frozen=True, slots=True)
class DealRecord:
    """A deal that carries a purchased domain and is still active."""

    deal_id: Optional[int]
    domain_name: str
    company_id: Optional[int]
    company_name: Optional[str]
    purchase_channel_code: int
    purchase_confirmed_date: str
    status: Optional[DealStatus]


# --- Reconciliation ---

class ActionKind(str, Enum):
    TOGGLE_AUTO_RENEW = "toggle_auto_renew"
    REACTIVATE_EXPIRED = "reactivate_expired"


@dataclass(frozen=True, slots=True)
class ReconciliationAction:
    """One matched deal/domain pair and what needs to happen to the domain."""

    domain_name: str
    company_name: Optional[str]
    deal_status: Optional[DealStatus]
    current_auto_renew: bool
    currently_expired: bool
    action_kind: ActionKind

    def as_row(self) -> dict:
        return {
            "domain": self.domain_name,
            "company": self.company_name or "",
            "deal_status": self.deal_status.name.lower() if self.deal_status is not None else "",
            "auto_renew": self.current_auto_renew,
            "expired": self.currently_expired,
            "action": self.action_kind.value,
        }


# --- Fetch diagnostics ---

@dataclass(slots=True)
class PageFailure:
    """A page whose contribution was dropped from a directory listing."""

    source: str
    page: int
    kind: str
    message: str

    def __str__(self) -> str:
        return f"{self.source} page {self.page} ({self.kind}): {self.message}"


@dataclass
class FetchResult(Generic[T]):
    """Materialized listing together with everything that was left out of it."""

    items: List[T] = field(default_factory=list)
    skipped_pages: List[PageFailure] = field(default_factory=list)
    excluded_records: int = 0
    total_pages: int = 0

    @property
    def complete(self) -> bool:
        return not self.skipped_pages

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


# --- Side effects ---

@dataclass(slots=True)
class ReactivationResult:
    """Outcome of a single reactivation request against the registrar API."""

    domain_name: str
    success: bool
    errors: List[str] = field(default_factory=list)


@dataclass(slots=True)
class AutomationReport:
    """Summary of one auto-renew toggling session in the browser."""

    requested: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def completed(self) -> bool:
        """False when the session itself broke down before every domain was attempted."""

        return self.error is None

    @property
    def succeeded(self) -> List[str]:
        if self.error is not None:
            return []
        failed = set(self.failed)
        return [domain for domain in self.requested if domain not in failed]


__all__ = [
    "ActionKind",
    "AutomationReport",
    "DealRecord",
    "DealStatus",
    "FetchResult",
    "PageFailure",
    "ReactivationResult",
    "ReconciliationAction",
    "RegistrarDomain",
]
