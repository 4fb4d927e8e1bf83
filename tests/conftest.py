"""Shared test fixtures and configuration."""

import asyncio
import json
from typing import Optional

import httpx
import pytest

from src.audit import AuditLogger
from src.config import ApiSettings
from src.forms import FormController
from src.orchestrator import ExpenseView
from src.services.api import ExpenseApiClient
from src.services.storage import InMemoryAuditStorage, InMemoryExpenseCache
from src.sync import DataSynchronizer


BASE_URL = "http://expenses.test"


class FakeExpenseServer:
    """
    Stand-in for the remote expense API.

    Serves GET/POST /api/expense through httpx.MockTransport.
    Status codes, ids and a gate to hold POST open are all settable.
    """

    def __init__(self, expenses: Optional[list[dict]] = None):
        self.expenses: list[dict] = list(expenses or [])
        self.list_status = 200
        self.create_status = 201
        self.next_ids: list[str] = []
        self.persist_created = True
        self.post_gate: Optional[asyncio.Event] = None
        self.post_started = asyncio.Event()
        self.requests: list[httpx.Request] = []
        self.created_bodies: list[dict] = []
        self._counter = 0

    @property
    def get_count(self) -> int:
        return sum(1 for r in self.requests if r.method == "GET")

    def _new_id(self) -> str:
        if self.next_ids:
            return self.next_ids.pop(0)
        self._counter += 1
        return f"exp-{self._counter}"

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path != "/api/expense":
            return httpx.Response(404, json={"error": "not found"})

        if request.method == "GET":
            if self.list_status >= 400:
                return httpx.Response(self.list_status, json={"error": "boom"})
            return httpx.Response(200, json={"expenses": list(self.expenses)})

        if request.method == "POST":
            body = json.loads(request.content)
            self.created_bodies.append(body)
            self.post_started.set()
            if self.post_gate is not None:
                await self.post_gate.wait()
            if self.create_status >= 400:
                return httpx.Response(self.create_status, json={"error": "rejected"})
            record = {**body, "_id": self._new_id()}
            if self.persist_created:
                self.expenses.append(record)
            return httpx.Response(self.create_status, json=record)

        return httpx.Response(405)


async def wait_until(condition, timeout: float = 2.0) -> None:
    """Poll until condition() is true; fail the test after timeout seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


def make_expense(expense_id: str, amount: float = 10.0, **overrides) -> dict:
    """Wire-format expense record."""
    record = {
        "_id": expense_id,
        "date": "2024-01-01",
        "description": f"Expense {expense_id}",
        "category": "General",
        "amount": amount,
    }
    record.update(overrides)
    return record


@pytest.fixture
def api_settings() -> ApiSettings:
    return ApiSettings(
        base_url=BASE_URL,
        session_cookie_name="session",
        session_cookie="s3cret",
    )


@pytest.fixture
def server() -> FakeExpenseServer:
    return FakeExpenseServer()


@pytest.fixture
def client(api_settings: ApiSettings, server: FakeExpenseServer) -> ExpenseApiClient:
    return ExpenseApiClient(
        settings=api_settings,
        transport=httpx.MockTransport(server.handler),
    )


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage: InMemoryAuditStorage) -> AuditLogger:
    return AuditLogger(audit_storage)


@pytest.fixture
def cache() -> InMemoryExpenseCache:
    return InMemoryExpenseCache()


@pytest.fixture
def synchronizer(
    client: ExpenseApiClient,
    cache: InMemoryExpenseCache,
    audit_logger: AuditLogger,
) -> DataSynchronizer:
    return DataSynchronizer(
        client=client,
        cache=cache,
        audit_logger=audit_logger,
        refresh_interval_seconds=30,
    )


@pytest.fixture
def form(
    client: ExpenseApiClient,
    synchronizer: DataSynchronizer,
    audit_logger: AuditLogger,
) -> FormController:
    return FormController(
        client=client,
        synchronizer=synchronizer,
        audit_logger=audit_logger,
    )


@pytest.fixture
def view(synchronizer: DataSynchronizer, form: FormController) -> ExpenseView:
    return ExpenseView(synchronizer=synchronizer, form=form, currency_symbol="$")
