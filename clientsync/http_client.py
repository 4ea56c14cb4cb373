"""
http_client.py - HTTP Client for API Communication
===================================================
This module handles all HTTP communication with the clients API.

One HttpClient is created per run and passed by reference to the
authenticator, the lister and the status fetcher. It owns the underlying
requests Session (connection pool) and is closed when the run finishes.

Not included:
--------------
- No retries and no backoff: each stage decides what a failure means
- No timeout unless SYNC_TIMEOUT_SEC is set
"""

import logging
from typing import Any, Dict

import requests

from .config import Settings


logger = logging.getLogger(__name__)


# =============================================================================
# HTTP CLIENT CLASS
# =============================================================================

class HttpClient:
    """
    HTTP client for communicating with the clients API.

    Usage:
        client = HttpClient(settings)
        client.set_token(token)
        response = client.get("/clients", {"offset": 0, "limit": 1000})
        client.close()

    Network failures surface as requests.RequestException; HTTP error
    statuses are returned as-is for the caller to interpret.
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        """
        Initialize the HTTP client.

        Args:
            settings: Configuration object containing base URL and timeout
            session: Optional pre-built session (tests pass a fake here)
        """
        self.settings = settings

        # A Session gives us connection pooling across all stages. The status
        # fetcher shares it between worker threads: headers are only changed
        # by set_token() before any fan-out, and workers only call post().
        # requests does not promise Session thread safety; urllib3's pool is.
        self.s = session or requests.Session()
        self.s.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

        self.base = settings.api_base
        self.timeout = settings.timeout_sec

    # -------------------------------------------------------------------------
    # AUTHENTICATION
    # -------------------------------------------------------------------------

    def set_token(self, token: str):
        """
        Send the token on every following request.

        The API expects the bare token in the Authorization header, not a
        "Bearer <token>" value.
        """
        self.s.headers.update({"Authorization": token})

    # -------------------------------------------------------------------------
    # API REQUEST METHODS
    # -------------------------------------------------------------------------

    def get(self, path: str, params: Dict[str, Any] | None = None) -> requests.Response:
        url = f"{self.base}{path}"
        logger.debug(f"GET {url} params={params}")
        return self.s.get(url, params=params, timeout=self.timeout)

    def post(self, path: str, payload: Dict[str, Any]) -> requests.Response:
        url = f"{self.base}{path}"
        logger.debug(f"POST {url}")
        return self.s.post(url, json=payload, timeout=self.timeout)

    # -------------------------------------------------------------------------
    # CLEANUP METHODS
    # -------------------------------------------------------------------------

    def close(self):
        """Close the HTTP session and release pooled connections."""
        self.s.close()
