"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    admin_email: str
    admin_password: str
    token_secret: str
    token_ttl_seconds: int = 7 * 24 * 60 * 60
    frontend_origin: str = "*"
    max_upload_mb: float = 10
    max_image_dimension: int = 2560
    max_image_pixels: int = 40_000_000
    data_dir: Path = Path("data")
    upload_dir: Path = Path("uploads")
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def max_upload_bytes(self) -> int:
        """Upload size cap in bytes."""
        return int(self.max_upload_mb * 1024 * 1024)


def parse_allowed_origins(raw: str | None) -> list[str]:
    """Parse the CORS allow-list from env; empty or ``*`` means any origin."""
    if raw is None:
        return ["*"]
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return ["*"]
    origins = [chunk.strip().rstrip("/") for chunk in cleaned.split(",")]
    return [origin for origin in origins if origin] or ["*"]
