"""Demo backend exposing the users collection over REST."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, EmailStr, Field

from userdesk import __version__
from userdesk.config import get_settings
from userdesk.core.repository import UserRepository

settings = get_settings()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


class UserIn(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr


class UserOut(BaseModel):
    id: int
    name: str
    email: str


def create_app(repository: Optional[UserRepository] = None) -> FastAPI:
    """
    Build the backend application.

    Args:
        repository: Storage to serve; a fresh empty repository when omitted
    """
    repository = repository if repository is not None else UserRepository()

    app = FastAPI(title="User Directory API", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, specify exact origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.repository = repository

    @app.get("/api/users", response_model=list[UserOut])
    async def list_users():
        """Return every user in insertion order."""
        return [user.to_dict() for user in repository.list()]

    @app.post("/api/users", response_model=UserOut, status_code=201)
    async def create_user(payload: UserIn):
        """Create a user and return it with its assigned id."""
        user = await repository.create(payload.name, str(payload.email))
        logger.info(f"Created user {user.id} ({user.email})")
        return user.to_dict()

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "users": len(repository.list())
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn
    uvicorn.run(
        "userdesk.backend:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
