"""
statuses.py - Status Fetcher
=============================
Looks up client statuses with POST /clients {"userIds": [...]}.

How requests are issued:
------------------------
- Ids are split into consecutive batches of `batch_size` (order preserved)
- Batches go out in waves of `concurrency` parallel requests
- A wave must fully settle before the next one starts
- A failed batch is recorded as a BatchError; its siblings still complete

The returned statuses are the successful batch responses concatenated in
batch order. Ids from a failed batch simply have no status record.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Sequence

import requests

from .errors import BatchError
from .http_client import HttpClient
from .models import StatusRecord, StatusResult


logger = logging.getLogger(__name__)

STATUSES_PATH = "/clients"


def chunk(ids: Sequence[Any], size: int) -> List[List[Any]]:
    """
    Split `ids` into consecutive lists of at most `size` items.

    Examples:
        chunk([1, 2, 3, 4, 5], 2) -> [[1, 2], [3, 4], [5]]
        chunk([], 100)            -> []
    """
    if size <= 0:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [list(ids[i:i + size]) for i in range(0, len(ids), size)]


def _fetch_batch(http: HttpClient, index: int, batch: List[Any]) -> List[StatusRecord]:
    """Send one batch; any failure becomes a BatchError for that batch only."""
    try:
        r = http.post(STATUSES_PATH, {"userIds": batch})
    except requests.RequestException as e:
        raise BatchError(f"Error requesting statuses: {e}", index, batch) from e

    if not 200 <= r.status_code < 300:
        raise BatchError(
            f"Error requesting statuses: {r.status_code} {r.reason or ''}".strip(),
            index,
            batch,
            status=r.status_code,
        )

    try:
        data = r.json() or []
    except ValueError as e:
        raise BatchError(f"Invalid status response: {e}", index, batch) from e

    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise BatchError(
            f"Invalid status response: expected a list of records, got {type(data).__name__}",
            index,
            batch,
            status=r.status_code,
        )

    return [StatusRecord.from_api(item) for item in data]


def fetch_statuses(
    http: HttpClient,
    ids: Sequence[Any],
    batch_size: int = 100,
    concurrency: int = 5,
) -> StatusResult:
    """
    Fetch statuses for `ids` in waves of concurrent batch requests.

    Args:
        http: Authenticated HTTP client (shared by all worker threads)
        ids: Client identifiers to look up
        batch_size: Ids per request
        concurrency: Requests in flight per wave

    Returns:
        StatusResult with statuses from successful batches and one
        BatchError per failed batch.
    """
    batches = chunk(ids, batch_size)
    result = StatusResult()

    if not batches:
        return result

    logger.info(f"Requesting statuses for {len(ids)} clients in {len(batches)} batches, please wait...")

    # Workers share http's Session read-only (see HttpClient.__init__)
    with ThreadPoolExecutor(max_workers=concurrency) as pool:
        for start in range(0, len(batches), concurrency):
            wave = batches[start:start + concurrency]
            futures = [
                pool.submit(_fetch_batch, http, start + offset, batch)
                for offset, batch in enumerate(wave)
            ]
            result.batches_sent += len(futures)

            # Collect in submission order; result() blocks until each settles
            for future in futures:
                try:
                    result.statuses.extend(future.result())
                except BatchError as e:
                    result.failed.append(e)

            logger.debug(f"Wave starting at batch {start} settled")

    return result
