"""Configuration settings for vaultsync."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# NOTE: load_dotenv() is called in CLI main.py for faster module imports


@dataclass
class Settings:
    """Main settings container."""

    # Service endpoints
    identity_url: str = "https://identity.bitwarden.com"
    api_url: str = "https://api.bitwarden.com"

    # Reported to the identity service on login
    device_name: str = "vaultsync"

    # Seconds, None blocks until the server answers
    http_timeout: Optional[float] = None

    # Cache location (None = platform default)
    data_dir: Optional[Path] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        settings = cls()

        if url := os.getenv("VAULTSYNC_IDENTITY_URL"):
            settings.identity_url = url.rstrip("/")

        if url := os.getenv("VAULTSYNC_API_URL"):
            settings.api_url = url.rstrip("/")

        if name := os.getenv("VAULTSYNC_DEVICE_NAME"):
            settings.device_name = name

        if timeout := os.getenv("VAULTSYNC_HTTP_TIMEOUT"):
            try:
                settings.http_timeout = float(timeout)
            except ValueError:
                raise ValueError(f"VAULTSYNC_HTTP_TIMEOUT must be a number of seconds, got {timeout!r}") from None

        if data_dir := os.getenv("VAULTSYNC_DATA_DIR"):
            settings.data_dir = Path(data_dir).expanduser()

        if log_level := os.getenv("LOG_LEVEL"):
            settings.log_level = log_level

        if log_file := os.getenv("VAULTSYNC_LOG_FILE"):
            settings.log_file = Path(log_file)

        return settings


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure(settings: Optional[Settings]) -> None:
    """Set the global settings instance (None reloads from environment on next use)."""
    global _settings
    _settings = settings
