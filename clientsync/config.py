"""
config.py - Configuration Management
=====================================
This module loads and validates configuration from environment variables.
It reads settings from a .env file and builds one Settings object that is
passed explicitly to every part of the sync.

Environment Variables Used:
---------------------------
- GOOGLE_APPLICATION_CREDENTIALS : (Required) Path to the service account key file
- SHEET_ID                       : (Required) Target spreadsheet identifier
- API_BASE                       : (Required) Base URL of the clients API
- SYNC_USERNAME       : (Optional) Username used to register/login (default: "ggggg")
- SYNC_PAGE_LIMIT     : (Optional) Clients requested per list call (default: 1000)
- SYNC_CLIENT_CAP     : (Optional) Hard cap on listed clients (default: 100000)
- SYNC_BATCH_SIZE     : (Optional) Ids per status request (default: 100)
- SYNC_CONCURRENCY    : (Optional) Status requests per wave (default: 5)
- SYNC_ROWS_PER_PAGE  : (Optional) Clients written per sheet (default: 50000)
- SYNC_SHEET_NAMES    : (Optional) Comma separated sheet names (default: "Page1,Page2")
- SYNC_TIMEOUT_SEC    : (Optional) Request timeout in seconds (default: no timeout)
- SYNC_LOG_LEVEL      : (Optional) Logging level name (default: "INFO")

Example .env file:
------------------
GOOGLE_APPLICATION_CREDENTIALS=./service-account.json
SHEET_ID=1AbCdEfGhIjKlMnOpQrStUvWxYz
API_BASE=https://clients-api.example.com/api
"""

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

from .errors import ConfigError


# =============================================================================
# SETTINGS DATACLASS
# =============================================================================

@dataclass
class Settings:
    """Container for all sync configuration values."""

    # Required: service account key used to write to Google Sheets
    credentials_path: str

    # Required: spreadsheet that receives the pages
    spreadsheet_id: str

    # Required: base URL of the REST API (e.g., "https://api.example.com")
    api_base: str

    # The single username that drives the run
    username: str = "ggggg"

    # Client listing: page size per request and hard cap on the total
    page_limit: int = 1000
    client_cap: int = 100_000

    # Status lookups: ids per request and requests per wave
    batch_size: int = 100
    concurrency: int = 5

    # Output: rows per sheet and one sheet name per page
    rows_per_page: int = 50_000
    sheet_names: Tuple[str, ...] = ("Page1", "Page2")

    # None means requests wait forever
    timeout_sec: float | None = None

    log_level: str = "INFO"


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _clean(v: str | None) -> str | None:
    """
    Clean and normalize an environment variable value.

    Examples:
        _clean('  hello  ')     -> 'hello'
        _clean('"quoted"')      -> 'quoted'
        _clean('')              -> None
        _clean(None)            -> None
    """
    if v is None:
        return None

    v = v.strip()

    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1]

    return v if v else None


def _positive_int(name: str, default: int) -> int:
    """Read an optional positive integer, raising ConfigError on junk."""
    raw = _clean(os.getenv(name))
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _timeout(name: str) -> float | None:
    raw = _clean(os.getenv(name))
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _log_level(name: str) -> str:
    level = (_clean(os.getenv(name)) or "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"{name} is not a logging level: {level!r}")
    return level


def _sheet_names(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = _clean(os.getenv(name))
    if raw is None:
        return default
    names = tuple(part.strip() for part in raw.split(",") if part.strip())
    if not names:
        raise ConfigError(f"{name} must list at least one sheet name")
    return names


# =============================================================================
# MAIN CONFIGURATION LOADER
# =============================================================================

def load_settings(env_file: Path | None = None) -> Settings:
    """
    Load sync configuration from environment variables.

    This function:
    1. Finds and loads the .env file from the project root
    2. Reads the three required variables and reports every missing one
    3. Reads and validates the optional tunables
    4. Returns a Settings object with all configuration

    Args:
        env_file: Optional explicit .env path (defaults to the project root)

    Returns:
        Settings: A dataclass containing all configuration values

    Raises:
        ConfigError: If a required variable is missing or a tunable is invalid
    """
    # ---------------------------------------------------------------------
    # STEP 1: Load the .env file (project root, one level above clientsync/)
    # ---------------------------------------------------------------------
    root_env = env_file or Path(__file__).resolve().parents[1] / ".env"
    load_dotenv(dotenv_path=root_env)

    # ---------------------------------------------------------------------
    # STEP 2: Required values, all checked up front
    # ---------------------------------------------------------------------
    required = {
        "GOOGLE_APPLICATION_CREDENTIALS": _clean(os.getenv("GOOGLE_APPLICATION_CREDENTIALS")),
        "SHEET_ID": _clean(os.getenv("SHEET_ID")),
        "API_BASE": _clean(os.getenv("API_BASE")),
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Please add them to your .env file."
        )

    base = required["API_BASE"]
    if not base.startswith("http"):
        base = "https://" + base
    base = base.rstrip("/")

    # ---------------------------------------------------------------------
    # STEP 3: Build and return the Settings object
    # ---------------------------------------------------------------------
    return Settings(
        credentials_path=required["GOOGLE_APPLICATION_CREDENTIALS"],
        spreadsheet_id=required["SHEET_ID"],
        api_base=base,
        username=_clean(os.getenv("SYNC_USERNAME")) or "ggggg",
        page_limit=_positive_int("SYNC_PAGE_LIMIT", 1000),
        client_cap=_positive_int("SYNC_CLIENT_CAP", 100_000),
        batch_size=_positive_int("SYNC_BATCH_SIZE", 100),
        concurrency=_positive_int("SYNC_CONCURRENCY", 5),
        rows_per_page=_positive_int("SYNC_ROWS_PER_PAGE", 50_000),
        sheet_names=_sheet_names("SYNC_SHEET_NAMES", ("Page1", "Page2")),
        timeout_sec=_timeout("SYNC_TIMEOUT_SEC"),
        log_level=_log_level("SYNC_LOG_LEVEL"),
    )
