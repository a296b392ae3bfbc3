"""
Dropnote Backend — Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads DROPNOTE_* environment variables (or a .env
       file), validates types/ranges, and provides a singleton `settings`.
Who:   Imported by main.py; create_app() also accepts an explicit instance.
When:  Loaded once at module import time.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development.
    """

    # ── Static Assets ─────────────────────────────────────────────────────
    # Directory served under static_prefix. Relative paths resolve against
    # the process working directory.
    assets_dir: str = Field(default="./public")

    # Reserved URL prefix for static files; must look like "/name/".
    static_prefix: str = Field(default="/static/")

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="DROPNOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("static_prefix")
    @classmethod
    def validate_static_prefix(cls, v: str) -> str:
        """Normalizes the prefix to a leading and trailing slash."""
        stripped = v.strip("/")
        if not stripped:
            raise ValueError("static_prefix cannot be the site root")
        return f"/{stripped}/"

    @property
    def assets_path(self) -> Path:
        return Path(self.assets_dir)

    def check_assets_dir(self) -> None:
        """
        Raises ValueError if assets_dir is missing or not a directory.

        Called from the lifespan hook, which logs the problem and keeps
        serving; static requests then answer 404.
        """
        path = self.assets_path
        if not path.exists():
            raise ValueError(f"Assets directory '{path}' does not exist")
        if not path.is_dir():
            raise ValueError(f"Assets path '{path}' is not a directory")


settings = Settings()
