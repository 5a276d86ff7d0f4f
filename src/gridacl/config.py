"""Application configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from gridacl.domain.paths import path_join


class Settings(BaseSettings):
    """Grid client settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="GRIDACL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Grid connection
    grid_url: str = Field(
        default="http://localhost:9000/irods-http-api/0.3.0",
        description="Base URL of the grid's HTTP API",
    )
    username: str = Field(default="rods", description="Account used to connect to the grid")
    password: str = Field(default="", description="Password of the grid account")
    zone: str = Field(default="tempZone", description="Grid zone name")
    request_timeout: float = Field(default=30.0, gt=0, description="Per-request timeout, seconds")

    # Connection retries
    max_retries: int = Field(default=0, ge=0, description="Retries after a transient connect failure")
    retry_sleep_ms: int = Field(default=0, ge=0, description="Pause between connect retries, ms")

    # Behaviour
    page_size: int = Field(default=500, gt=0, description="Rows per listing page")
    admin_users: list[str] = Field(
        default_factory=list,
        description="Principals never touched by permission propagation",
    )

    # Application
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment name",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def home_root(self) -> str:
        """Zone-wide home collection, parent of every user home."""
        return path_join("/", self.zone, "home")

    @property
    def trash_root(self) -> str:
        """Trash collection of the connecting account."""
        return path_join("/", self.zone, "trash", "home", self.username)

    def user_home(self, user: str) -> str:
        return path_join(self.home_root, user)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
