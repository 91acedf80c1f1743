"""Configuration management using Pydantic Settings."""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "http://localhost:5000/api"


class Settings(BaseSettings):
    """Application settings loaded from USERDESK_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="USERDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Gateway
    api_url: str = DEFAULT_API_URL

    # Frontend
    frontend_host: str = "0.0.0.0"
    frontend_port: int = 3000

    # Backend
    backend_host: str = "0.0.0.0"
    backend_port: int = 5000

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Deploy
    registry: str = "your-registry"
    image_tag: str = "latest"
    namespace: str = "microservice-demo"
    manifests_dir: str = "k8s"
    ingress_attempts: int = 30
    ingress_interval: float = 10.0


# Read once at process start
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
