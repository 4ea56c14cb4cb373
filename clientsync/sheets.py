"""
sheets.py - Google Sheets Writer
=================================
Turns enriched clients into a rectangular table and writes it to one tab
of the target spreadsheet.

Every write is a destructive replace:
1. Update "<tab>!A1" with the header row plus one row per client
2. Clear the rows below the table, left over from a longer previous run

A failed update leaves the previous content untouched; the tab is never
left empty.

Authentication uses a service account key file with the spreadsheets
scope. Any failure (bad key file, auth, API error) is raised as a
WriteError for that tab only.
"""

import logging
from typing import Any, List, Sequence

import pandas as pd
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .errors import WriteError
from .models import SHEET_COLUMNS, EnrichedClient


logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# Cell where every table starts
ANCHOR_CELL = "A1"

# Right-most column of every table (nine columns: A..I)
LAST_COLUMN = chr(ord("A") + len(SHEET_COLUMNS) - 1)


# =============================================================================
# TABLE FORMATTING
# =============================================================================

def to_frame(enriched: Sequence[EnrichedClient]) -> pd.DataFrame:
    """
    Build a DataFrame with the nine sheet columns, one row per client.

    dtype=object keeps ids and phone numbers exactly as the API sent them
    (no int -> float promotion when a value is missing).
    """
    df = pd.DataFrame([e.as_row() for e in enriched], columns=SHEET_COLUMNS, dtype=object)
    # Missing values become empty cells
    return df.where(df.notna(), "")


def build_table(enriched: Sequence[EnrichedClient]) -> List[List[Any]]:
    """
    Header row followed by one row per client, in input order.

    Example:
        [["id", "firstName", ..., "status"],
         [1, "Ann", ..., "active"]]
    """
    df = to_frame(enriched)
    return [list(df.columns)] + df.to_numpy().tolist()


# =============================================================================
# WRITER
# =============================================================================

class SheetWriter:
    """
    Writes tables to tabs of one spreadsheet.

    Usage:
        writer = SheetWriter(settings.credentials_path, settings.spreadsheet_id)
        writer.write(enriched_clients, "Page1")
    """

    def __init__(self, credentials_path: str, spreadsheet_id: str, service: Any = None):
        """
        Args:
            credentials_path: Service account key file
            spreadsheet_id: Target spreadsheet
            service: Optional pre-built Sheets service (tests pass a fake here)
        """
        self.credentials_path = credentials_path
        self.spreadsheet_id = spreadsheet_id
        self._service = service

    def _get_service(self):
        """Build the Sheets v4 service on first use."""
        if self._service is None:
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_path, scopes=SCOPES
            )
            self._service = build("sheets", "v4", credentials=creds, cache_discovery=False)
        return self._service

    def write(self, enriched: Sequence[EnrichedClient], sheet_name: str) -> int:
        """
        Replace the contents of `sheet_name` with the given clients.

        The table is written over the tab from A1 first; only then are the
        rows below it (left over from a longer previous run) cleared. A
        failed update leaves the previous content in place, never an empty
        tab. A failed clear leaves the new table followed by stale rows.

        Returns:
            Number of data rows written (header excluded)

        Raises:
            WriteError: if the key file, auth or Sheets API call fails
        """
        values = build_table(enriched)

        try:
            values_api = self._get_service().spreadsheets().values()
            values_api.update(
                spreadsheetId=self.spreadsheet_id,
                range=f"{sheet_name}!{ANCHOR_CELL}",
                valueInputOption="RAW",
                body={"values": values},
            ).execute()
            values_api.clear(
                spreadsheetId=self.spreadsheet_id,
                range=f"{sheet_name}!A{len(values) + 1}:{LAST_COLUMN}",
                body={},
            ).execute()
        except (HttpError, GoogleAuthError, OSError, ValueError) as e:
            raise WriteError(f"Error writing to Google Sheets ({sheet_name}): {e}", sheet_name) from e

        logger.info(f"Data successfully written to Google Sheets (Sheet: {sheet_name})")
        return len(values) - 1
