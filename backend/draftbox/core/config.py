"""Application configuration using pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DRAFTBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Draftbox"
    version: str = "0.1.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3001, description="API server port")

    # Paths
    config_path: Path = Field(
        default=Path("./data"),
        description="Directory holding the SQLite database",
    )

    # Database
    database_url: str | None = Field(
        default=None,
        description="Database connection URL (defaults to SQLite under config_path)",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )

    # Library defaults
    default_design_name: str = Field(
        default="Untitled Design",
        description="Name given to designs created without one",
    )
    default_folder_name: str = Field(
        default="New Folder",
        description="Name given to folders created without one",
    )
    default_tag_color: str = Field(
        default="#6B7280",
        description="Display color for tags created without one",
    )

    # Autosave
    autosave_delay_seconds: float = Field(
        default=3.0,
        ge=0.1,
        le=60.0,
        description="Quiet period after the last edit before an autosave fires",
    )

    @property
    def db_path(self) -> Path:
        """Get the SQLite database file path."""
        return self.config_path / "draftbox.db"


# Global settings instance
settings = Settings()
