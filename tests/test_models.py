"""Unit tests for model classes and configuration."""

import dataclasses

import pytest

from userdesk.config import DEFAULT_API_URL, get_settings
from userdesk.models.user import Draft, User


def test_user_creation():
    """Test User model creation and methods."""
    user = User(1, "Ada", "ada@x.com")
    assert user.id == 1
    assert user.name == "Ada"
    assert user.email == "ada@x.com"

    user_dict = user.to_dict()
    assert user_dict == {"id": 1, "name": "Ada", "email": "ada@x.com"}
    assert User.from_dict(user_dict) == user


def test_user_is_immutable():
    """Test fetched records cannot be edited in place."""
    user = User(1, "Ada", "ada@x.com")
    with pytest.raises(dataclasses.FrozenInstanceError):
        user.name = "Eve"


def test_user_from_dict_ignores_extra_fields():
    """Test unknown server fields are dropped."""
    user = User.from_dict({"id": "abc", "name": "Ada", "email": "ada@x.com", "createdAt": "now"})
    assert user == User("abc", "Ada", "ada@x.com")


def test_draft_defaults_and_completeness():
    """Test Draft starts empty and needs both fields."""
    draft = Draft()
    assert draft.to_dict() == {"name": "", "email": ""}
    assert not draft.is_complete()

    draft.name = "Ada"
    assert not draft.is_complete()
    draft.email = "ada@x.com"
    assert draft.is_complete()
    assert not Draft("  ", "ada@x.com").is_complete()

    copy = draft.copy()
    copy.name = "Eve"
    assert draft.name == "Ada"


def test_settings_default_api_url(monkeypatch):
    """Test the gateway base URL falls back to the local default."""
    monkeypatch.delenv("USERDESK_API_URL", raising=False)
    assert get_settings().api_url == DEFAULT_API_URL


def test_settings_api_url_override(monkeypatch):
    """Test the base URL can be overridden from the environment."""
    monkeypatch.setenv("USERDESK_API_URL", "http://backend:5000/api")
    settings = get_settings()
    assert settings.api_url == "http://backend:5000/api"
    assert get_settings() is settings
