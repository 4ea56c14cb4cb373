"""Shared fakes: an in-memory clients API and a Sheets service."""

from __future__ import annotations

import re
import threading
from typing import Any, Callable, Dict, List, Optional, Set

import pytest
import requests

from clientsync.config import Settings
from clientsync.http_client import HttpClient


# ---------------------------------------------------------------------------
# HTTP fakes
# ---------------------------------------------------------------------------

NO_JSON = object()


class Response:
    def __init__(self, status_code: int = 200, json_data: Any = None, text: str = "", reason: str = ""):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.reason = reason

    def json(self) -> Any:
        if self._json is NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._json


class Session:
    """Stands in for requests.Session; every call goes through `handler`."""

    def __init__(self, handler: Callable[..., Any]):
        self.handler = handler
        self.headers: Dict[str, str] = {}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False
        self._lock = threading.Lock()

    def _dispatch(self, method: str, url: str, params=None, json=None):
        with self._lock:
            self.calls.append({
                "method": method,
                "url": url,
                "params": params,
                "json": json,
                "headers": dict(self.headers),
            })
        resp = self.handler(method, url, params=params, json=json, headers=dict(self.headers))
        if isinstance(resp, Exception):
            raise resp
        return resp

    def get(self, url, params=None, timeout=None):
        return self._dispatch("GET", url, params=params)

    def post(self, url, json=None, timeout=None):
        return self._dispatch("POST", url, json=json)

    def close(self):
        self.closed = True


class FakeApi:
    """
    In-memory version of the clients API.

    - `total_clients` clients with ids 0..N-1
    - registration answers `register_status` (200 issues "reg-token")
    - login answers `login_status` (200 issues "login-token")
    - status batches whose first id is in `failing_batch_first_ids` get a 500
    """

    def __init__(self, total_clients: int = 0):
        self.total_clients = total_clients
        self.register_status = 200
        self.login_status = 200
        self.list_fail_at_offset: Optional[int] = None
        self.failing_batch_first_ids: Set[int] = set()
        self.status_for: Callable[[int], Any] = lambda i: f"status-{i}"

    def client(self, i: int) -> Dict[str, Any]:
        return {
            "id": i,
            "firstName": f"First{i}",
            "lastName": f"Last{i}",
            "gender": "female" if i % 2 else "male",
            "address": f"{i} Main St",
            "city": "Springfield",
            "phone": f"555-{i:04d}",
            "email": f"user{i}@example.com",
        }

    def __call__(self, method, url, params=None, json=None, headers=None):
        if url.endswith("/auth/registration"):
            if self.register_status == 200:
                return Response(200, {"token": "reg-token"})
            return Response(self.register_status, {}, text="already registered")

        if url.endswith("/auth/login"):
            if self.login_status == 200:
                return Response(200, {"token": "login-token"})
            return Response(self.login_status, {}, text="nope")

        if url.endswith("/clients") and method == "GET":
            offset, limit = params["offset"], params["limit"]
            if self.list_fail_at_offset is not None and offset >= self.list_fail_at_offset:
                return Response(503, None, reason="Service Unavailable")
            end = min(offset + limit, self.total_clients)
            return Response(200, [self.client(i) for i in range(offset, end)])

        if url.endswith("/clients") and method == "POST":
            ids = json["userIds"]
            if ids and ids[0] in self.failing_batch_first_ids:
                return Response(500, None, reason="Internal Server Error")
            return Response(200, [{"id": i, "status": self.status_for(i)} for i in ids])

        return Response(404, None, reason="Not Found")


# ---------------------------------------------------------------------------
# Sheets fake
# ---------------------------------------------------------------------------


class _Request:
    def __init__(self, fn):
        self._fn = fn

    def execute(self):
        return self._fn()


class FakeSheetsService:
    """
    Keeps each tab as a list of rows.

    update() overwrites rows from A1 (longer old content survives below it),
    clear() of "<tab>!A<n>:<col>" drops row n and everything after it.
    `fail_with[tab]` makes update() raise, `fail_clear_with[tab]` clear().
    """

    def __init__(self):
        self.written: Dict[str, List[List[Any]]] = {}
        self.cleared: List[str] = []
        self.updates: List[Dict[str, Any]] = []
        self.fail_with: Dict[str, Exception] = {}
        self.fail_clear_with: Dict[str, Exception] = {}

    def spreadsheets(self):
        return self

    def values(self):
        return self

    def _sheet(self, rng: str) -> str:
        return rng.split("!")[0]

    def clear(self, spreadsheetId, range, body=None):
        def run():
            sheet = self._sheet(range)
            if sheet in self.fail_clear_with:
                raise self.fail_clear_with[sheet]
            self.cleared.append(range)
            first_row = int(re.match(r"[A-Z]+(\d+)", range.split("!")[1]).group(1))
            del self.written.setdefault(sheet, [])[first_row - 1:]
            return {}
        return _Request(run)

    def update(self, spreadsheetId, range, valueInputOption, body):
        def run():
            sheet = self._sheet(range)
            if sheet in self.fail_with:
                raise self.fail_with[sheet]
            self.updates.append({
                "spreadsheetId": spreadsheetId,
                "range": range,
                "valueInputOption": valueInputOption,
            })
            rows = self.written.setdefault(sheet, [])
            new = body["values"]
            rows[:len(new)] = new
            return {"updatedRows": len(new)}
        return _Request(run)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        credentials_path="key.json",
        spreadsheet_id="sheet-123",
        api_base="http://test/api",
    )


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def session(api) -> Session:
    return Session(api)


@pytest.fixture
def http(settings, session) -> HttpClient:
    return HttpClient(settings, session=session)


@pytest.fixture
def sheets_service() -> FakeSheetsService:
    return FakeSheetsService()


def network_error(msg: str = "connection refused") -> requests.ConnectionError:
    return requests.ConnectionError(msg)
