"""Shared fixtures and gateway doubles."""

import asyncio
from typing import Dict, List, Optional

import pytest

from userdesk.config import reset_settings
from userdesk.core.exceptions import TransportError
from userdesk.models.user import Draft, User


class FakeGateway:
    """Gateway double returning queued list results and recording creates."""

    def __init__(self, list_results: Optional[list] = None, create_error: Optional[TransportError] = None):
        self.list_results = list(list_results or [])
        self.create_error = create_error
        self.list_calls = 0
        self.created: List[Draft] = []

    async def list(self) -> List[User]:
        self.list_calls += 1
        result = self.list_results.pop(0) if self.list_results else []
        if isinstance(result, Exception):
            raise result
        return result

    async def create(self, draft: Draft) -> None:
        self.created.append(draft.copy())
        if self.create_error is not None:
            raise self.create_error


class ControlledGateway:
    """Gateway double whose list calls resolve only when the test says so."""

    def __init__(self):
        self.pending: List[asyncio.Future] = []

    async def list(self) -> List[User]:
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future

    async def create(self, draft: Draft) -> None:
        return None


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; start every test from a clean read."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def ada():
    return User(1, "Ada", "ada@x.com")


@pytest.fixture
def bob():
    return User(2, "Bob", "bob@x.com")


class HoldingGateway:
    """Gateway double whose creates wait until the test resolves them by name."""

    def __init__(self, users: List[User]):
        self.users = users
        self.holds: Dict[str, asyncio.Future] = {}
        self.created: List[Draft] = []

    async def list(self) -> List[User]:
        return list(self.users)

    async def create(self, draft: Draft) -> None:
        self.created.append(draft.copy())
        future = asyncio.get_running_loop().create_future()
        self.holds[draft.name] = future
        await future
