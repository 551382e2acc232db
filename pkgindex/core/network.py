"""Network utilities for HTTP requests and session management.

Provides a centralized HTTP session and a single-attempt GET that reports
status, body and round-trip timing. Failures are raised as NetworkError;
nothing here retries unless the configured urllib3 budget says so.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import NetworkError
from .config import get_network_config

logger = logging.getLogger(__name__)

# Global session (lazy-initialized)
_SESSION: Optional[requests.Session] = None

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": "sourcepkg/0.1 (+https://android.googlesource.com)",
    "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
}


@dataclass
class FetchResponse:
    """Outcome of one GET: status, decoded body and wall-clock timing."""

    url: str
    status_code: int
    body: str
    sent_at_ms: int
    received_at_ms: int

    @property
    def elapsed_ms(self) -> int:
        return self.received_at_ms - self.sent_at_ms

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def build_session() -> requests.Session:
    """Build a configured requests session with default headers.

    The urllib3 retry budget is taken from network.max_retries (default 0,
    i.e. a single attempt per request).

    Returns:
        Configured Session instance
    """
    net = get_network_config()
    session = requests.Session()

    retry = Retry(
        total=int(net.get("max_retries", 0) or 0),
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset(["GET", "HEAD"]),
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update(DEFAULT_HEADERS)
    session.headers.update({str(k): str(v) for k, v in net["headers"].items() if v is not None})
    session.verify = bool(net.get("verify_ssl", True))

    return session


def get_session() -> requests.Session:
    """Get the global HTTP session (lazy initialization).

    Returns:
        Configured Session instance
    """
    global _SESSION
    if _SESSION is None:
        _SESSION = build_session()
    return _SESSION


def reset_session() -> None:
    """Drop the global session so the next call rebuilds it from config."""
    global _SESSION
    if _SESSION is not None:
        _SESSION.close()
    _SESSION = None


def _now_ms() -> int:
    return int(time.time() * 1000)


def fetch(url: str, timeout: Optional[float] = None) -> FetchResponse:
    """HTTP GET returning status, body and timing.

    Args:
        url: URL to request
        timeout: Request timeout in seconds (defaults to network.timeout_s)

    Returns:
        FetchResponse for any HTTP status, including 4xx/5xx

    Raises:
        NetworkError: On connection, timeout or other transport failure
    """
    session = get_session()
    effective_timeout = float(timeout if timeout is not None else get_network_config()["timeout_s"])

    sent_at = _now_ms()
    try:
        resp = session.get(url, timeout=effective_timeout)
    except requests.exceptions.Timeout as e:
        raise NetworkError(f"Request timed out after {effective_timeout:.1f}s: {url}", url=url) from e
    except requests.exceptions.RequestException as e:
        raise NetworkError(f"Request failed for {url}: {e}", url=url) from e
    received_at = _now_ms()

    logger.debug("GET %s -> %s in %dms", url, resp.status_code, received_at - sent_at)

    return FetchResponse(
        url=url,
        status_code=resp.status_code,
        body=resp.text or "",
        sent_at_ms=sent_at,
        received_at_ms=received_at,
    )
