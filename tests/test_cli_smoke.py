"""Smoke tests for the CLI entry point."""
from __future__ import annotations

import json

import pytest

from autorenew_reconciler import __main__, cli
from autorenew_reconciler.clients import NetworkError
from autorenew_reconciler.models import ActionKind, DealStatus, ReconciliationAction
from autorenew_reconciler.orchestrator import RunSummary

ENVIRONMENT = {
    "NC_APIKEY": "nc-key",
    "NC_USER": "webhub",
    "NC_IP": "203.0.113.7",
    "PIPELINE_DEALS_API_KEY": "pd-key",
}


class FakeOrchestrator:
    def __init__(self, summary: RunSummary | None = None, error: Exception | None = None) -> None:
        self._summary = summary or RunSummary()
        self._error = error

    def run(self) -> RunSummary:
        if self._error is not None:
            raise self._error
        return self._summary


@pytest.fixture
def captured_build(monkeypatch):
    calls = []
    action = ReconciliationAction(
        domain_name="a.com",
        company_name="Acme",
        deal_status=DealStatus.GREEN,
        current_auto_renew=False,
        currently_expired=False,
        action_kind=ActionKind.TOGGLE_AUTO_RENEW,
    )
    summary = RunSummary(domains_fetched=3, deals_qualifying=1, actions=[action], toggle=["a.com"], dry_run=True)

    def fake_build(config, credentials, *, dry_run=False, reactivate_expired=None):
        calls.append({"config": config, "credentials": credentials, "dry_run": dry_run, "reactivate": reactivate_expired})
        return FakeOrchestrator(summary)

    monkeypatch.setattr(cli, "build_orchestrator", fake_build)
    return calls


def test_cli_dry_run_prints_summary_and_writes_report(tmp_path, capsys, captured_build) -> None:
    config_path = tmp_path / "settings.json"
    config_path.write_text(json.dumps({"registrar": {"page_size": 50}}), encoding="utf-8")
    report_path = tmp_path / "actions.csv"

    exit_code = cli.main(
        [
            "--dry-run",
            "--config",
            str(config_path),
            "--include-last-deal-page",
            "--dedupe",
            "--report",
            str(report_path),
        ],
        environ=ENVIRONMENT,
    )

    assert exit_code == 0
    (call,) = captured_build
    assert call["dry_run"] is True
    assert call["reactivate"] is None
    assert call["config"] == {
        "registrar": {"page_size": 50},
        "deals": {"page_range": "inclusive"},
        "reconcile": {"duplicates": "dedupe"},
    }
    assert call["credentials"].browser is None
    assert "a.com" in report_path.read_text(encoding="utf-8")
    output = capsys.readouterr().out
    assert "Domains to toggle: 1" in output
    assert "Dry run: no changes were made" in output


def test_cli_requires_browser_credentials_unless_dry_run(captured_build) -> None:
    exit_code = cli.main([], environ=ENVIRONMENT)

    assert exit_code == 2
    assert captured_build == []


def test_cli_reports_sizing_failures(monkeypatch) -> None:
    monkeypatch.setattr(
        cli,
        "build_orchestrator",
        lambda *args, **kwargs: FakeOrchestrator(error=NetworkError("GET failed")),
    )

    assert cli.main(["--dry-run"], environ=ENVIRONMENT) == 1


def test_apply_overrides_leaves_original_config_untouched() -> None:
    original = {"browser": {"slow_mo": 100}}
    args = cli.parse_args(["--headful", "--sandbox"])

    merged = cli.apply_overrides(original, args)

    assert merged == {"browser": {"slow_mo": 100, "headless": False}, "registrar": {"sandbox": True}}
    assert original == {"browser": {"slow_mo": 100}}


def test_module_entry_point_shows_help(capsys) -> None:
    exit_code = __main__.main(["--help"])

    captured = capsys.readouterr()
    assert "python -m autorenew_reconciler" in captured.out
    assert exit_code == 0
