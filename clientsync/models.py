"""
models.py - Records and Results
================================
Plain dataclasses for what flows through the sync: the API's client and
status records, the enriched rows written to the sheet, and the typed
results each stage hands back to the orchestrator.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import BatchError, ListError, WriteError


# Status written when no status record matches a client
SENTINEL_STATUS = "Unknown"

# Header row of every sheet, in column order
SHEET_COLUMNS = [
    "id",
    "firstName",
    "lastName",
    "gender",
    "address",
    "city",
    "phone",
    "email",
    "status",
]


# =============================================================================
# API RECORDS
# =============================================================================

@dataclass
class Client:
    """One record from GET /clients."""

    id: Any
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Client":
        """Build a Client from the API's camelCase payload."""
        return cls(
            id=data.get("id"),
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            gender=data.get("gender"),
            address=data.get("address"),
            city=data.get("city"),
            phone=data.get("phone"),
            email=data.get("email"),
        )


@dataclass
class StatusRecord:
    """One record from POST /clients."""

    id: Any
    status: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "StatusRecord":
        return cls(id=data.get("id"), status=data.get("status"))


@dataclass
class EnrichedClient:
    client: Client
    status: str = SENTINEL_STATUS

    def as_row(self) -> Dict[str, Any]:
        """Map to the sheet's column names."""
        c = self.client
        return {
            "id": c.id,
            "firstName": c.first_name,
            "lastName": c.last_name,
            "gender": c.gender,
            "address": c.address,
            "city": c.city,
            "phone": c.phone,
            "email": c.email,
            "status": self.status,
        }


# =============================================================================
# STAGE RESULTS
# =============================================================================

@dataclass
class ListResult:
    """Clients gathered by the lister, plus the error that stopped it (if any)."""

    clients: List[Client] = field(default_factory=list)
    error: Optional[ListError] = None

    @property
    def partial(self) -> bool:
        return self.error is not None


@dataclass
class StatusResult:
    """Statuses from successful batches; failed batches are listed, not raised."""

    statuses: List[StatusRecord] = field(default_factory=list)
    failed: List[BatchError] = field(default_factory=list)
    batches_sent: int = 0

    @property
    def partial(self) -> bool:
        return bool(self.failed)


@dataclass
class PageOutcome:
    sheet_name: str
    rows: int = 0
    error: Optional[WriteError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SyncReport:
    """What one run did; returned by run_sync() for logging and tests."""

    token_obtained: bool = False
    clients_listed: int = 0
    list_error: Optional[ListError] = None
    pages: List[PageOutcome] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def pages_written(self) -> int:
        return sum(1 for p in self.pages if p.ok)
