"""Shared test fixtures."""

import inspect

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from ledgerdesk.api.deps import get_backend
from ledgerdesk.core.backend import BackendClient
from ledgerdesk.main import app
from ledgerdesk.schemas.client import Client
from ledgerdesk.services.session import ReviewSession, SessionStore

ONLINE_CLIENT = {"_id": "c-online", "name": "Globex", "client_number": 101, "account_type": "online"}
DESKTOP_CLIENT = {"_id": "c-desktop", "name": "Acme", "client_number": "102", "qb_type": "desktop"}


class FakeBackend:
    """Stand-in bookkeeping backend: canned handlers keyed by method and path."""

    def __init__(self) -> None:
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def add(self, method, path, handler=None, *, json=None, status=200, content=None, headers=None):
        if handler is None:
            def handler(request):
                return httpx.Response(status, json=json, content=content, headers=headers)
        self.routes[(method, path)] = handler

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})
        response = handler(request)
        if inspect.isawaitable(response):
            response = await response
        return response

    def calls(self, method, path) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


def make_transaction(txn_id, **fields) -> dict:
    data = {
        "transaction_id": txn_id,
        "upload_id": "u1",
        "transaction_date": "2024-01-15",
        "vendor_name": "Office Depot",
        "amount": -245.99,
        "payment_type": "card",
        "transaction_type": "debit",
        "auto_category": None,
        "manual_category": None,
        "approved": False,
    }
    data.update(fields)
    return data


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
async def backend(fake_backend):
    client = BackendClient(
        "http://backend.test",
        token="test-token",
        transport=httpx.MockTransport(fake_backend.handle),
    )
    yield client
    await client.aclose()


@pytest.fixture
def session():
    return ReviewSession("test")


@pytest.fixture
def online_client():
    return Client.model_validate(ONLINE_CLIENT)


@pytest.fixture
def desktop_client():
    return Client.model_validate(DESKTOP_CLIENT)


@pytest.fixture
async def client(backend):
    """Async test client for the FastAPI app, wired to the fake backend."""
    app.dependency_overrides[get_backend] = lambda: backend
    app.state.sessions = SessionStore()
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_txn():
    return make_transaction


@pytest.fixture
def client_registry(fake_backend):
    """Backend client listing with one online and one desktop client."""
    fake_backend.add("GET", "/clients", json=[ONLINE_CLIENT, DESKTOP_CLIENT])
    return [ONLINE_CLIENT, DESKTOP_CLIENT]
