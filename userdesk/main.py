"""Web frontend: the single-page user form backed by a CollectionStore."""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

import httpx
from fastapi import FastAPI, Form, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sse_starlette.sse import EventSourceResponse

from userdesk import __version__
from userdesk.config import get_settings
from userdesk.core.gateway import UserGateway
from userdesk.core.store import CollectionStore
from userdesk.models.user import Draft

# Configure logging
logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


async def state_events(store: CollectionStore) -> AsyncIterator[Dict[str, Any]]:
    """
    Yield the store state once on connect and again after every change.

    Args:
        store: Store to follow
    """
    queue: asyncio.Queue = asyncio.Queue()
    unsubscribe = store.subscribe(lambda s: queue.put_nowait(s.snapshot()))
    try:
        yield {"event": "state", "data": json.dumps(store.snapshot())}
        while True:
            snapshot = await queue.get()
            yield {"event": "state", "data": json.dumps(snapshot)}
    finally:
        unsubscribe()


def render_page(request: Request, status_code: int = 200, **overrides: Any):
    """Render the page from the store state, with per-request values on top."""
    context = request.app.state.store.snapshot()
    context.update(overrides)
    return templates.TemplateResponse(request, "index.html", context, status_code=status_code)


def create_app(
    store: Optional[CollectionStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the frontend application.

    When no store is given, one is created on startup around a gateway
    pointed at the configured API URL and its initial load is started.
    A store passed in is used as is and not mounted.

    Args:
        store: Pre-built store, mostly for tests
        transport: Optional httpx transport for the gateway built on startup
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is not None:
            yield
            return

        settings = get_settings()
        gateway = UserGateway(settings.api_url, transport=transport)
        app.state.store = CollectionStore(gateway)
        logger.info(f"Using users API at {gateway.base_url}")
        mount_task = asyncio.create_task(app.state.store.mount())
        try:
            yield
        finally:
            if not mount_task.done():
                mount_task.cancel()
            await asyncio.gather(mount_task, return_exceptions=True)
            await gateway.aclose()

    app = FastAPI(title="User Directory", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, specify exact origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if store is not None:
        app.state.store = store

    @app.get("/")
    async def index(request: Request):
        """Render the form and the current collection."""
        return render_page(request)

    @app.post("/users")
    async def submit_user(request: Request, name: str = Form(""), email: str = Form("")):
        """
        Submit the posted form values.

        Each request carries its own draft, so concurrent visitors never see
        or reset each other's input. On success the browser is sent back to
        the page; otherwise the form is re-rendered with the posted values.
        """
        draft = Draft(name=name.strip(), email=email.strip())
        if not draft.is_complete():
            return render_page(request, 422, draft=draft.to_dict(), error="Name and email are required.")

        if not await request.app.state.store.submit_draft(draft):
            return render_page(request, 502, draft=draft.to_dict(), error="Could not create user. Please try again.")

        return RedirectResponse("/", status_code=303)

    @app.get("/api/state")
    async def get_state(request: Request):
        """Current store state as JSON."""
        return request.app.state.store.snapshot()

    @app.get("/events")
    async def events(request: Request):
        return EventSourceResponse(state_events(request.app.state.store))

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        current = request.app.state.store
        return {
            "status": "healthy",
            "loading": current.loading,
            "users": len(current.users)
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "userdesk.main:app",
        host=settings.frontend_host,
        port=settings.frontend_port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
