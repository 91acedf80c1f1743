"""Custom exceptions for the application."""

from typing import Optional


class UserdeskError(Exception):
    """Base exception for userdesk errors."""
    pass


class TransportError(UserdeskError):
    """Raised when the backend cannot be reached or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DeployError(UserdeskError):
    """Raised when a deploy pipeline step fails."""

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.step = step
