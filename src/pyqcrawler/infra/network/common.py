from __future__ import annotations

"""
Shared HTTP Plumbing.

Holds the client identity and timeout policy, and builds the pooled
'requests' session whose adapter retries transient failures a bounded
number of times.
"""

from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

# Listing servers in the wild reject generic library agents
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 15
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


def create_session(
        max_retries: int = 2,
        backoff_factor: float = 0.5,
        pool_size: int = 4,
        user_agent: Optional[str] = None,
) -> requests.Session:
    """
    Build a session with bounded transient retries and browser-like headers.

    Retries cover connection errors, read errors and the status codes in
    RETRY_STATUS_CODES. They never raise on exhaustion so the caller sees
    the final response status.

    Args:
        max_retries: Total retry budget per request.
        backoff_factor: Exponential backoff base in seconds.
        pool_size: Connection pool size per host.
        user_agent: Overrides the default browser User-Agent.

    Returns:
        requests.Session: Configured session.
    """
    sess = requests.Session()
    retry = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=list(RETRY_STATUS_CODES),
        allowed_methods=["GET", "HEAD"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=pool_size, pool_maxsize=pool_size * 2)
    sess.mount("http://", adapter)
    sess.mount("https://", adapter)
    sess.headers.update({
        "User-Agent": user_agent or USER_AGENT,
        "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    })
    return sess
