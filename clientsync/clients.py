"""
clients.py - Client Lister
===========================
Pages through GET /clients until the cap is reached or the API stops
giving data.

Stop conditions:
----------------
- The accumulated count reaches the cap (result is cut to exactly the cap)
- The API returns an empty page (normal end of data)
- The API returns a non-200 status        -> partial result + ListError
- The request itself fails (network etc.) -> partial result + ListError
- The body is not a JSON list of records   -> partial result + ListError

Identifiers are not deduplicated; overlapping pages pass through as-is.
"""

import logging

import requests

from .errors import ListError
from .http_client import HttpClient
from .models import Client, ListResult


logger = logging.getLogger(__name__)

CLIENTS_PATH = "/clients"


def list_clients(http: HttpClient, limit: int = 1000, cap: int = 100_000) -> ListResult:
    """
    Collect up to `cap` clients, `limit` per request.

    Args:
        http: Authenticated HTTP client
        limit: Page size sent as the `limit` query parameter
        cap: Hard maximum on the number of clients returned

    Returns:
        ListResult with the clients gathered so far and, if a request
        failed, the ListError that stopped the loop.
    """
    result = ListResult()
    offset = 0

    while len(result.clients) < cap:
        logger.info(f"Requesting clients, please wait... Offset: {offset}")

        try:
            r = http.get(CLIENTS_PATH, {"offset": offset, "limit": limit})
        except requests.RequestException as e:
            result.error = ListError(f"Error requesting clients: {e}", offset)
            break

        if r.status_code != 200:
            result.error = ListError(
                f"Error fetching clients: {r.status_code} {r.reason or ''}".strip(),
                offset,
                status=r.status_code,
            )
            break

        try:
            page = r.json() or []
        except ValueError as e:
            result.error = ListError(f"Invalid clients response: {e}", offset, status=r.status_code)
            break

        if not isinstance(page, list) or not all(isinstance(item, dict) for item in page):
            result.error = ListError(
                f"Invalid clients response: expected a list of records, got {type(page).__name__}",
                offset,
                status=r.status_code,
            )
            break

        if not page:
            logger.debug(f"Empty page at offset {offset}, no more clients")
            break

        result.clients.extend(Client.from_api(item) for item in page)
        offset += limit

    # A page may overshoot the cap when limit does not divide it
    del result.clients[cap:]
    return result
