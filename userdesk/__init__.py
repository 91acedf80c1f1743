"""User directory demo: single-page form, REST gateway and deploy tooling."""

__version__ = "1.0.0"
