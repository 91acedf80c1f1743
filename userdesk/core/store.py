"""Client-side collection store: the loading flag, the fetched users and the form draft."""

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

from userdesk.core.exceptions import TransportError
from userdesk.models.user import Draft, User

logger = logging.getLogger(__name__)

Listener = Callable[['CollectionStore'], None]


class Gateway(Protocol):
    async def list(self) -> List[User]: ...

    async def create(self, draft: Draft) -> None: ...


class CollectionStore:
    """
    Owns the view state and orchestrates calls to the gateway.

    The collection is only ever replaced wholesale by the result of a list
    fetch; creating a user triggers a full refetch instead of a local insert.
    Gateway failures are logged and kept in ``last_error``, never raised.
    """

    def __init__(self, gateway: Gateway):
        self.gateway = gateway
        self.users: List[User] = []
        self.draft = Draft()
        self.loading = False
        self.last_error: Optional[TransportError] = None
        self._generation = 0
        self._mounted = False
        self._listeners: List[Listener] = []

    async def mount(self) -> None:
        """Initial load. Later calls are no-ops."""
        if self._mounted:
            return
        self._mounted = True
        await self.load_all()

    async def load_all(self) -> None:
        """
        Replace the collection with the server's current list.

        Each call takes a new generation number; a response that resolves
        after a newer call was issued is dropped, so the latest request wins
        regardless of resolution order.
        """
        self._generation += 1
        generation = self._generation
        self.loading = True
        self._notify()

        try:
            users = await self.gateway.list()
        except TransportError as e:
            if generation != self._generation:
                logger.debug(f"Discarding failure of stale fetch {generation}")
                return
            logger.error(f"Error fetching users: {str(e)}")
            self.last_error = e
        else:
            if generation != self._generation:
                logger.debug(f"Discarding stale fetch {generation} (latest is {self._generation})")
                return
            self.users = list(users)
            self.last_error = None

        self.loading = False
        self._notify()

    async def submit_draft(self, draft: Optional[Draft] = None) -> bool:
        """
        Create a user from the draft, then refetch the whole collection.

        Args:
            draft: Values to submit; defaults to the store's own draft

        Returns:
            True if the create call succeeded
        """
        draft = draft if draft is not None else self.draft
        try:
            await self.gateway.create(draft)
        except TransportError as e:
            logger.error(f"Error creating user: {str(e)}")
            self.last_error = e
            self._notify()
            return False

        self.draft = Draft()
        self.last_error = None
        self._notify()
        await self.load_all()
        return True

    def update_draft(self, name: Optional[str] = None, email: Optional[str] = None) -> None:
        """Form field change handler."""
        if name is not None:
            self.draft.name = name
        if email is not None:
            self.draft.email = email
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called after every state change.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view of the current state."""
        return {
            'users': [user.to_dict() for user in self.users],
            'draft': self.draft.to_dict(),
            'loading': self.loading,
            'error': str(self.last_error) if self.last_error else None
        }

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Store listener failed: {str(e)}")
