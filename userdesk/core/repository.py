"""In-memory user repository backing the demo API."""

import asyncio
from typing import List, Optional

from userdesk.models.user import User


class UserRepository:
    """
    Append-only user list with sequential integer ids.

    Writes are serialized by an asyncio lock so ids stay unique and
    contiguous when requests interleave.
    """

    def __init__(self, initial_users: Optional[List[tuple]] = None):
        """
        Initialize repository with seed data.

        Args:
            initial_users: Optional ``(name, email)`` pairs to insert in order
        """
        self.users: List[User] = []
        self.id_counter = 0
        self._mutex = asyncio.Lock()

        for name, email in initial_users or []:
            self._insert(name, email)

    def list(self) -> List[User]:
        """Users in insertion order."""
        return list(self.users)

    async def create(self, name: str, email: str) -> User:
        async with self._mutex:
            return self._insert(name, email)

    def _insert(self, name: str, email: str) -> User:
        self.id_counter += 1
        user = User(id=self.id_counter, name=name, email=email)
        self.users.append(user)
        return user
