"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(env_prefix="PRINTSERVER_SERVER__")

    host: str = "0.0.0.0"
    port: int = 43110

    # Keep HTTP 200 for failed prints (existing POS clients read the body)
    strict_status_codes: bool = False


class ImageSettings(BaseSettings):
    """Logo / QR code download settings."""

    model_config = SettingsConfigDict(env_prefix="PRINTSERVER_IMAGES__")

    fetch_timeout: float = Field(default=10.0, gt=0)
    max_bytes: int = Field(default=5 * 1024 * 1024, gt=0)


class PrinterSettings(BaseSettings):
    """Thermal printer transport settings."""

    model_config = SettingsConfigDict(env_prefix="PRINTSERVER_PRINTER__")

    default_network_port: int = 9600
    connect_timeout: float = 5.0
    write_timeout: float = 30.0

    # Raster chunking for the TCP interface
    chunk_size: int = 4096


class FontSettings(BaseSettings):
    """Fonts used for the receipt bitmap (must cover Arabic)."""

    model_config = SettingsConfigDict(env_prefix="PRINTSERVER_FONTS__")

    regular_path: str = ""
    bold_path: str = ""


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PRINTSERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Environment
    env: Literal["simulator", "hardware"] = "hardware"
    debug: bool = False

    # Where the simulator printer drops rendered receipts (empty = keep in memory)
    preview_path: Path | None = None

    # Nested settings
    server: ServerSettings = Field(default_factory=ServerSettings)
    images: ImageSettings = Field(default_factory=ImageSettings)
    printer: PrinterSettings = Field(default_factory=PrinterSettings)
    fonts: FontSettings = Field(default_factory=FontSettings)

    @property
    def is_simulator(self) -> bool:
        """Check if print jobs go to the mock printer."""
        return self.env == "simulator"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
