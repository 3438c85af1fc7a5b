"""Configuration settings for the room reconciliation job."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Job settings loaded from environment variables."""

    # MongoDB settings
    mongodb_uri: str = "mongodb://localhost:27017/boardinghouse_db"
    mongodb_database: str | None = None
    default_database: str = "boardinghouse_db"
    mongodb_server_selection_timeout_ms: int = 30000
    mongodb_connect_timeout_ms: int = 20000
    mongodb_socket_timeout_ms: int = 20000

    # Logging settings
    log_level: str = "INFO"

    # How many tenant -> user mappings to print before repairing
    mapping_preview_limit: int = 5

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
