"""User and draft models for the user directory."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class User:
    """A user record as returned by the backend. Never mutated by the client."""

    id: Any
    name: str
    email: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert user to dictionary representation."""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        """Create User instance from dictionary."""
        return cls(
            id=data['id'],
            name=data['name'],
            email=data['email']
        )

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, name={self.name!r}, email={self.email!r})"


@dataclass
class Draft:
    """The not-yet-submitted input held by the creation form."""

    name: str = ""
    email: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'email': self.email
        }

    def is_complete(self) -> bool:
        """Both fields are required by the form; whitespace alone does not count."""
        return bool(self.name.strip()) and bool(self.email.strip())

    def copy(self) -> 'Draft':
        return Draft(name=self.name, email=self.email)
