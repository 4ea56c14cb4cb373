"""
errors.py - Sync Error Types
=============================
Every failure the sync knows about is one of these. Fatal kinds abort the
run (or, for WriteError, one page); partial kinds are carried inside the
typed results so the orchestrator decides what to log and whether to go on.
"""

from typing import Any, List


class SyncError(RuntimeError):
    """Base class for all sync failures."""


class ConfigError(SyncError):
    """Required configuration is missing or a tunable is invalid."""


class AuthError(SyncError):
    """Registration or login failed."""


class ConflictError(AuthError):
    """The username is already registered; recovered by logging in."""


class ListError(SyncError):
    """A client page request failed; the listing keeps what it has."""

    def __init__(self, message: str, offset: int, status: int | None = None):
        super().__init__(message)
        self.offset = offset
        self.status = status


class BatchError(SyncError):
    """A status batch request failed; only that batch's statuses are lost."""

    def __init__(self, message: str, index: int, ids: List[Any], status: int | None = None):
        super().__init__(message)
        self.index = index
        self.ids = ids
        self.status = status


class WriteError(SyncError):
    """Writing one page to the spreadsheet failed."""

    def __init__(self, message: str, sheet_name: str):
        super().__init__(message)
        self.sheet_name = sheet_name
