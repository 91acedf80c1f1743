"""HTTP gateway translating list/create operations into calls on the users endpoint."""

import logging
from typing import Any, List, Optional

import httpx

from userdesk.config import DEFAULT_API_URL
from userdesk.core.exceptions import TransportError
from userdesk.models.user import Draft, User

logger = logging.getLogger(__name__)


class UserGateway:
    """Thin async client for ``{base}/users``.

    No retries and no timeout: a call that never answers never resolves.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the gateway.

        Args:
            base_url: API root, e.g. ``http://localhost:5000/api``
            client: Optional pre-built client; the gateway only closes clients it created
            transport: Transport for the client the gateway creates itself
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=None, transport=transport)
        self._client = client

    @property
    def users_url(self) -> str:
        return f"{self.base_url}/users"

    async def list(self) -> List[User]:
        """
        Fetch the full collection.

        Returns:
            Users in the order the server returned them

        Raises:
            TransportError: On network failure, non-2xx status or a malformed body
        """
        response = await self._request("GET", self.users_url)
        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {self.users_url}: {str(e)}", response.status_code) from e

        if not isinstance(body, list):
            raise TransportError(f"Expected a JSON array from {self.users_url}", response.status_code)

        try:
            return [User.from_dict(item) for item in body]
        except (KeyError, TypeError) as e:
            raise TransportError(f"Malformed user record from {self.users_url}: {str(e)}", response.status_code) from e

    async def create(self, draft: Draft) -> None:
        """
        Create one user from the draft. The response body is ignored.

        Raises:
            TransportError: On network failure or non-2xx status
        """
        await self._request("POST", self.users_url, json=draft.to_dict())

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {str(e)}") from e

        if not response.is_success:
            raise TransportError(f"{method} {url} returned {response.status_code}", response.status_code)

        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> 'UserGateway':
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
