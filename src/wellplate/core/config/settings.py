"""Application settings loaded from environment variables."""

from __future__ import annotations

from datetime import tzinfo
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """WellPlate stress engine configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default; the server has no auth layer.
    wp_host: str = "127.0.0.1"
    wp_port: int = 8011
    wp_log_level: str = "info"
    wp_allow_insecure_bind: bool = False

    # Storage (shared with the usage monitor process)
    db_path: str = "~/.wellplate/wellplate.db"

    # Encryption for food log text fields
    encryption_key: str = ""

    # Connectors
    apple_health_export_path: str = ""

    # Calendar days are computed in this zone (empty = system local zone)
    local_timezone: str = ""

    def resolve_timezone(self) -> tzinfo | None:
        """Return the configured zone, or None to use the system local zone."""
        if not self.local_timezone:
            return None
        return ZoneInfo(self.local_timezone)


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
