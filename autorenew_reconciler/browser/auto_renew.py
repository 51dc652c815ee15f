"""Turn on auto-renew for domains through the Namecheap dashboard.

Prerequisites
-------------
* Requires :mod:`playwright` with Chromium installed (``playwright install chromium``).
* The registrar offers no API call for the auto-renew flag, so the toggle is
  flipped through the account dashboard one domain at a time in a single
  browser session.
* A domain that cannot be toggled is logged and reported; the remaining
  domains are still attempted.
"""
from __future__ import annotations

import contextlib
import logging
import time
from typing import List, Optional, Sequence

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..config import BrowserCredentials
from ..models import AutomationReport
from .base import AutomationError, BrowserConfig, BrowserSession

LOGGER = logging.getLogger(__name__)


class AutoRenewToggler(BrowserSession):
    """Drives the registrar dashboard to enable auto-renew for a list of domains."""

    LOGIN_URL = "https://www.namecheap.com/myaccount/login-signup"
    DOMAIN_LIST_URL = "https://ap.www.namecheap.com/domains/list/"

    USERNAME_FIELD = ".loginForm .nc_username"
    PASSWORD_FIELD = ".loginForm .nc_password"
    LOGIN_BUTTON = ".loginForm .nc_login_submit"
    LOGGED_IN_MARKER = "li.domains"
    SEARCH_FIELD = '.gb-form-control[placeholder="Search"]'
    AUTO_RENEW_TOGGLE = "auto-renew .gb-toggle__input"
    CONFIRM_BUTTON = "single-autorenew-confirm-modal .gb-btn"
    RESULT_TOAST = ".gb-alert__content"

    def __init__(self, credentials: BrowserCredentials, config: Optional[BrowserConfig] = None) -> None:
        super().__init__(config=config)
        self.credentials = credentials

    def run_auto_renew_toggle(self, domains: Sequence[str]) -> AutomationReport:
        """Launch a browser, log in, and toggle every domain in order."""

        report = AutomationReport(requested=list(domains))
        if not domains:
            return report

        started = time.monotonic()
        try:
            with sync_playwright() as playwright:
                browser = playwright.chromium.launch(
                    headless=self.config.headless,
                    slow_mo=self.config.slow_mo,
                )
                try:
                    context = browser.new_context(viewport=self.config.viewport)
                    page = context.new_page()
                    page.set_default_navigation_timeout(self.config.navigation_timeout * 1000)
                    page.set_default_timeout(self.config.action_timeout * 1000)
                    self.login(page)
                    report.failed = self.toggle_domains(page, domains)
                finally:
                    with contextlib.suppress(PlaywrightError):
                        browser.close()
        except (AutomationError, PlaywrightError) as exc:
            LOGGER.error("Browser session aborted: %s", exc)
            report.error = str(exc)
            return report

        LOGGER.info(
            "Auto-renew enabled for %s of %s domain(s) in %.2f seconds",
            len(report.succeeded),
            len(report.requested),
            time.monotonic() - started,
        )
        return report

    def login(self, page) -> None:
        """Sign in to the dashboard and wait until the account menu is visible."""

        try:
            page.goto(self.LOGIN_URL, wait_until="domcontentloaded")
            page.wait_for_selector(self.USERNAME_FIELD)
            page.fill(self.USERNAME_FIELD, self.credentials.username)
            page.fill(self.PASSWORD_FIELD, self.credentials.password)
            page.click(self.LOGIN_BUTTON)
            page.wait_for_selector(self.LOGGED_IN_MARKER)
        except PlaywrightError as exc:
            raise AutomationError("Unable to log in to the registrar dashboard") from exc

    def toggle_domains(self, page, domains: Sequence[str]) -> List[str]:
        """Toggle each domain on an authenticated page and return the ones that failed."""

        failed: List[str] = []
        page.goto(self.DOMAIN_LIST_URL)
        for index, domain in enumerate(domains, start=1):
            LOGGER.info("Toggling auto-renew for %s (%s of %s)", domain, index, len(domains))
            toggled = False
            try:
                self._toggle_one(page, domain)
                toggled = True
            except PlaywrightError:
                LOGGER.exception("Failed to toggle auto-renew for %s", domain)
            try:
                self._apply_throttle()
                page.goto(self.DOMAIN_LIST_URL)
            except PlaywrightError:
                LOGGER.exception("Could not return to the domain list after %s", domain)
                toggled = False
            if not toggled:
                failed.append(domain)
        return failed

    def _toggle_one(self, page, domain: str) -> None:
        page.wait_for_selector(self.SEARCH_FIELD)
        page.fill(self.SEARCH_FIELD, domain)
        # The list filters as you type; only act once a single row remains.
        page.wait_for_function(
            "(selector) => document.querySelectorAll(selector).length === 1",
            arg=self.AUTO_RENEW_TOGGLE,
        )
        page.click(self.AUTO_RENEW_TOGGLE)
        page.wait_for_selector(self.CONFIRM_BUTTON)
        page.click(self.CONFIRM_BUTTON)
        page.wait_for_selector(self.RESULT_TOAST)
