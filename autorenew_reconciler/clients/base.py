"""Common plumbing shared by the paginated directory clients."""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..models import PageFailure

LOGGER = logging.getLogger(__name__)


class NetworkError(RuntimeError):
    """A request could not be completed (timeout, connection reset, non-2xx)."""


class ParseError(RuntimeError):
    """A response body did not decode into the expected shape."""


def build_session(timeout_seconds: float = 30.0, max_retries: int = 2) -> requests.Session:
    """Return a session that retries transient transport errors and applies a default timeout."""

    session = requests.Session()
    retry = Retry(
        total=max_retries,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    request = session.request

    def request_with_timeout(*args, **kwargs):
        kwargs.setdefault("timeout", timeout_seconds)
        return request(*args, **kwargs)

    session.request = request_with_timeout  # type: ignore[method-assign]
    return session


class RequestPacer:
    """Enforces a minimum interval between consecutive API requests."""

    def __init__(
        self,
        requests_per_minute: Optional[float] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.interval = 60.0 / float(requests_per_minute) if requests_per_minute else 0.0
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._next_slot = 0.0

    def wait(self) -> None:
        if self.interval <= 0:
            return
        with self._lock:
            now = self._clock()
            if now < self._next_slot:
                self._sleep(self._next_slot - now)
                now = self._clock()
            self._next_slot = now + self.interval


class PaginatedClient:
    """Base class for clients that walk a paginated listing one page at a time."""

    source = "api"

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        pacer: Optional[RequestPacer] = None,
    ) -> None:
        self._session = session or build_session()
        self._pacer = pacer or RequestPacer(None)

    def _get(self, url: str, params: Dict[str, Any]) -> requests.Response:
        self._pacer.wait()
        try:
            response = self._session.get(url, params=params)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NetworkError(f"GET {url} failed: {exc}") from exc
        return response

    def _record_failure(self, failures: List[PageFailure], page: int, exc: Exception) -> None:
        kind = "network" if isinstance(exc, NetworkError) else "parse"
        LOGGER.warning("Skipping %s page %s after %s error: %s", self.source, page, kind, exc)
        failures.append(PageFailure(source=self.source, page=page, kind=kind, message=str(exc)))
