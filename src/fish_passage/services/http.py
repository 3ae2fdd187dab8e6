"""
Shared HTTP client with automatic retry and backoff.

Provides a pre-configured ``requests.Session`` that retries on transient
network errors (timeouts, connection resets, 502/503/504) with exponential
backoff.  The DART catalog loader and batch fetcher take a session argument
and default to the module-level one.

Usage::

    from fish_passage.services.http import session

    resp = session.get("https://www.cbr.washington.edu/dart/query/adult_daily")
    resp.raise_for_status()
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from fish_passage import __version__

DEFAULT_TIMEOUT = 30  # seconds


def build_retry(total: int = 4, backoff_factor: float = 2) -> Retry:
    """Retry strategy for the transient errors DART returns under load."""
    return Retry(
        total=total,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 502, 503, 504],
        allowed_methods=["GET", "HEAD", "OPTIONS"],
        raise_on_status=False,  # let resp.raise_for_status() handle it
    )


#: Default retry strategy: 0s, 2s, 4s, 8s between retries.
DEFAULT_RETRY = build_retry()


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    pool_size: int = 10,
) -> requests.Session:
    """
    Build a ``requests.Session`` with retry adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``DEFAULT_RETRY``).
        timeout: Default timeout applied to every request.
        pool_size: Connections kept per host; match the fetch worker count.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY, pool_maxsize=pool_size)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = f"fish-passage/{__version__} (python-requests)"

    # Inject a default timeout so callers don't need to pass ``timeout=``.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Module-level session; import and use directly.
session: requests.Session = create_session()
