"""Tests for the web frontend routes and the state event stream."""

import asyncio
import json
import time

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import FakeGateway, HoldingGateway
from userdesk.core.exceptions import TransportError
from userdesk.core.store import CollectionStore
from userdesk.main import create_app, state_events
from userdesk.models.user import Draft


def make_client(store: CollectionStore) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=create_app(store)), base_url="http://frontend")


@pytest.mark.asyncio
async def test_index_renders_users(ada, bob):
    """Test the page lists the loaded users."""
    store = CollectionStore(FakeGateway([[ada, bob]]))
    await store.mount()

    async with make_client(store) as client:
        response = await client.get("/")

    assert response.status_code == 200
    assert "Ada" in response.text
    assert "bob@x.com" in response.text
    assert "Add New User" in response.text


@pytest.mark.asyncio
async def test_submit_form_creates_and_redirects(ada, bob):
    """Test a form post creates the user, refetches and redirects."""
    gateway = FakeGateway([[ada], [ada, bob]])
    store = CollectionStore(gateway)
    await store.mount()

    async with make_client(store) as client:
        response = await client.post("/users", data={"name": "Bob", "email": "bob@x.com"})
        state = (await client.get("/api/state")).json()

    assert response.status_code == 303
    assert response.headers["location"] == "/"
    assert gateway.created == [Draft("Bob", "bob@x.com")]
    assert [user["name"] for user in state["users"]] == ["Ada", "Bob"]
    assert state["draft"] == {"name": "", "email": ""}
    assert state["loading"] is False


@pytest.mark.asyncio
async def test_failed_submit_keeps_draft_in_form(ada):
    """Test the form is re-rendered with the typed values after a failed create."""
    gateway = FakeGateway([[ada]], create_error=TransportError("POST failed", 500))
    store = CollectionStore(gateway)
    await store.mount()

    async with make_client(store) as client:
        response = await client.post("/users", data={"name": "Bob", "email": "bob@x.com"})
        page = await client.get("/")
        state = (await client.get("/api/state")).json()

    assert response.status_code == 502
    assert 'value="Bob"' in response.text
    assert 'value="bob@x.com"' in response.text
    assert 'value="Bob"' not in page.text
    assert state["draft"] == {"name": "", "email": ""}
    assert state["error"] == "POST failed"
    assert gateway.list_calls == 1


@pytest.mark.asyncio
async def test_overlapping_submits_keep_their_own_input(ada):
    """Test a failed submit keeps its values even when another visitor's create succeeds."""
    gateway = HoldingGateway([ada])
    store = CollectionStore(gateway)
    await store.mount()

    async with make_client(store) as client:
        bob_post = asyncio.create_task(client.post("/users", data={"name": "Bob", "email": "b@x.com"}))
        alice_post = asyncio.create_task(client.post("/users", data={"name": "Alice", "email": "a@x.com"}))
        while len(gateway.holds) < 2:
            await asyncio.sleep(0)

        gateway.holds["Bob"].set_exception(TransportError("POST failed", 500))
        bob_response = await bob_post
        page_between = await client.get("/")

        gateway.holds["Alice"].set_result(None)
        alice_response = await alice_post

    assert bob_response.status_code == 502
    assert 'value="Bob"' in bob_response.text
    assert 'value="b@x.com"' in bob_response.text
    assert 'value="Bob"' not in page_between.text
    assert alice_response.status_code == 303
    assert store.draft == Draft()
    assert sorted(draft.name for draft in gateway.created) == ["Alice", "Bob"]


@pytest.mark.asyncio
@pytest.mark.parametrize("form", [
    {"name": "   ", "email": "bob@x.com"},
    {"name": "Bob", "email": ""},
    {"name": "Bob"},
])
async def test_incomplete_form_is_not_submitted(ada, form):
    """Test blank or whitespace-only fields never reach the gateway."""
    gateway = FakeGateway([[ada]])
    store = CollectionStore(gateway)
    await store.mount()

    async with make_client(store) as client:
        response = await client.post("/users", data=form)

    assert response.status_code == 422
    assert "Name and email are required." in response.text
    assert gateway.created == []
    assert gateway.list_calls == 1


@pytest.mark.asyncio
async def test_index_shows_loading_before_first_fetch():
    """Test the loading indicator is visible while a fetch is in flight."""
    store = CollectionStore(FakeGateway())
    store.loading = True

    async with make_client(store) as client:
        response = await client.get("/")

    assert '<p id="loading">Loading...</p>' in response.text


@pytest.mark.asyncio
async def test_health(ada):
    """Test health check endpoint."""
    store = CollectionStore(FakeGateway([[ada]]))
    await store.mount()

    async with make_client(store) as client:
        response = await client.get("/health")

    assert response.json() == {"status": "healthy", "loading": False, "users": 1}


@pytest.mark.asyncio
async def test_state_events_follow_store(ada):
    """Test the event stream sends the current state, then every change."""
    store = CollectionStore(FakeGateway([[ada]]))
    events = state_events(store)

    first = await events.__anext__()
    assert first["event"] == "state"
    assert json.loads(first["data"])["users"] == []

    store.update_draft(name="Bob")
    second = json.loads((await events.__anext__())["data"])
    assert second["draft"]["name"] == "Bob"

    await events.aclose()
    store.update_draft(name="Carl")
    assert store._listeners == []


def wait_for_initial_load(client: TestClient) -> dict:
    for _ in range(200):
        state = client.get("/api/state").json()
        if not state["loading"] and (state["users"] or state["error"]):
            return state
        time.sleep(0.01)
    raise AssertionError(f"initial load did not finish: {state}")


def test_startup_loads_users_from_configured_api(monkeypatch):
    """Test the default app builds its gateway from USERDESK_API_URL and mounts on startup."""
    monkeypatch.setenv("USERDESK_API_URL", "http://backend:5000/api")
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, json=[{"id": 1, "name": "Ada", "email": "ada@x.com"}])

    with TestClient(create_app(transport=httpx.MockTransport(handler))) as client:
        state = wait_for_initial_load(client)
        page = client.get("/")

    assert requested == ["http://backend:5000/api/users"]
    assert state["users"] == [{"id": 1, "name": "Ada", "email": "ada@x.com"}]
    assert state["error"] is None
    assert "ada@x.com" in page.text


def test_startup_load_failure_is_swallowed(monkeypatch):
    """Test an unreachable API leaves an empty list, no loading flag and a recorded error."""
    monkeypatch.setenv("USERDESK_API_URL", "http://backend:5000/api")

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with TestClient(create_app(transport=httpx.MockTransport(handler))) as client:
        state = wait_for_initial_load(client)
        health = client.get("/health").json()

    assert state["users"] == []
    assert "connection refused" in state["error"]
    assert health == {"status": "healthy", "loading": False, "users": 0}
