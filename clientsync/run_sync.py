"""
run_sync.py - Main Application Entry Point
===========================================
This is the script that runs the whole client sync, once.

What it does:
-------------
1. Loads configuration from environment variables (.env file)
2. Registers (or logs in) the fixed username to get an API token
3. Lists clients, up to the configured cap
4. Splits them into fixed-size pages (Page1, Page2)
5. For each page independently: fetch statuses, merge, write the sheet tab

Usage:
------
    python -m clientsync.run_sync
    clientsync

There are no command line options. Errors are logged and the process
still exits normally.
"""

import logging
import sys
import time
from typing import List, Sequence, TypeVar

from .auth import authenticate
from .clients import list_clients
from .config import Settings, load_settings
from .errors import ConfigError, WriteError
from .http_client import HttpClient
from .merger import merge
from .models import PageOutcome, SyncReport
from .sheets import SheetWriter
from .statuses import fetch_statuses


logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# PAGING
# =============================================================================

def paginate(items: Sequence[T], rows_per_page: int, page_count: int) -> List[List[T]]:
    """
    Cut `items` into exactly `page_count` consecutive pages.

    Trailing pages may be empty; anything beyond rows_per_page * page_count
    is dropped.

    Example:
        paginate(range(5), 2, 2) -> [[0, 1], [2, 3]]
    """
    return [
        list(items[i * rows_per_page:(i + 1) * rows_per_page])
        for i in range(page_count)
    ]


# =============================================================================
# ONE PAGE
# =============================================================================

def sync_page(http: HttpClient, writer: SheetWriter, settings: Settings, page, sheet_name: str) -> PageOutcome:
    """Fetch statuses for one page, merge them in and write the tab."""
    outcome = PageOutcome(sheet_name=sheet_name)

    ids = [client.id for client in page]
    statuses = fetch_statuses(http, ids, settings.batch_size, settings.concurrency)
    for failure in statuses.failed:
        logger.error(f"[{sheet_name}] Batch {failure.index} ({len(failure.ids)} ids) dropped: {failure}")

    enriched = merge(page, statuses.statuses)
    logger.info(
        f"[{sheet_name}] {len(enriched)} clients, {len(statuses.statuses)} statuses "
        f"from {statuses.batches_sent - len(statuses.failed)}/{statuses.batches_sent} batches"
    )

    try:
        outcome.rows = writer.write(enriched, sheet_name)
    except WriteError as e:
        logger.error(str(e))
        outcome.error = e

    return outcome


# =============================================================================
# MAIN SYNC
# =============================================================================

def run_sync(
    settings: Settings,
    http: HttpClient | None = None,
    writer: SheetWriter | None = None,
) -> SyncReport:
    """
    Run the full pipeline once and report what happened.

    Args:
        settings: Loaded configuration
        http: Optional HTTP client (created and closed here if omitted)
        writer: Optional sheet writer (built from settings if omitted)

    Returns:
        SyncReport describing token, listing and per-page outcomes. Any
        unexpected exception is logged and stored in report.error.
    """
    report = SyncReport()
    owns_http = http is None
    http = http or HttpClient(settings)
    writer = writer or SheetWriter(settings.credentials_path, settings.spreadsheet_id)

    try:
        # ---------------------------------------------------------------------
        # STEP 1: Authenticate
        # ---------------------------------------------------------------------
        token = authenticate(http, settings.username)
        if not token:
            logger.error("Failed to obtain token")
            return report
        report.token_obtained = True

        # ---------------------------------------------------------------------
        # STEP 2: List clients
        # ---------------------------------------------------------------------
        listed = list_clients(http, settings.page_limit, settings.client_cap)
        report.clients_listed = len(listed.clients)
        report.list_error = listed.error
        if listed.partial:
            logger.warning(f"{listed.error} (keeping {len(listed.clients)} clients)")

        if not listed.clients:
            logger.error("Failed to retrieve clients")
            return report

        # ---------------------------------------------------------------------
        # STEP 3: Each page is synced independently
        # ---------------------------------------------------------------------
        pages = paginate(listed.clients, settings.rows_per_page, len(settings.sheet_names))
        for sheet_name, page in zip(settings.sheet_names, pages):
            report.pages.append(sync_page(http, writer, settings, page, sheet_name))

    except Exception as e:
        logger.error(f"Error in process: {e}")
        report.error = e

    finally:
        if owns_http:
            http.close()

    return report


# =============================================================================
# SCRIPT ENTRY POINT
# =============================================================================

def main():
    """Configure logging, load settings, run once. Always returns normally."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )

    try:
        settings = load_settings()
    except ConfigError as e:
        logger.error(f"Fatal error: {e}")
        return

    logging.getLogger().setLevel(settings.log_level)
    logger.info(f"API base: {settings.api_base}")
    logger.info(f"Sheets: {', '.join(settings.sheet_names)} ({settings.rows_per_page} rows each)")

    start_time = time.time()
    report = run_sync(settings)

    logger.info("-" * 50)
    logger.info(f"Finished in {time.time() - start_time:.1f} seconds")
    logger.info(f"Clients listed: {report.clients_listed}")
    logger.info(f"Pages written: {report.pages_written}/{len(report.pages)}")
    logger.info("-" * 50)


if __name__ == '__main__':
    if __package__ is None:
        print(
            "ERROR: This script must be run as a module.\n"
            "Usage: python -m clientsync.run_sync"
        )
        sys.exit(1)

    main()
