"""Workflow orchestration for fetching, reconciling, and applying auto-renew changes."""

from .service import ReconciliationOrchestrator, RunSummary

__all__ = ["ReconciliationOrchestrator", "RunSummary"]
