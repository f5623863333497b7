from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_path: str = Field(
        default="./data/kanban.db", description="Path to SQLite database file"
    )
    database_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL; overrides database_path when set",
    )
    sqlite_busy_timeout_ms: int = Field(
        default=5000,
        ge=0,
        description="How long a transaction waits for the write lock before failing",
    )

    # Logging
    log_file: str | None = Field(
        default="logs/kanban.log",
        description="Rotated log file; set empty to log to stderr only",
    )

    # App
    app_name: str = Field(default="Kanban")
    debug: bool = Field(default=False)

    @computed_field
    @property
    def db_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.database_path}"

    @computed_field
    @property
    def db_directory(self) -> Path:
        return Path(self.database_path).parent


@lru_cache
def get_settings() -> Settings:
    return Settings()
