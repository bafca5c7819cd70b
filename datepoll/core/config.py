"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Days an event is kept after its last candidate date before the sweep
# deletes it.
RETENTION_DAYS = 7


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Date Poll"
    debug: bool = False
    log_file: str = ""  # Empty logs to stderr

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Storage
    storage_backend: str = "sql"  # "sql" or "memory"
    database_url: str = "sqlite:///./datepoll.db"

    # Slugs
    slug_length: int = 10
    slug_max_attempts: int = 5

    # Expiry sweep
    retention_days: int = RETENTION_DAYS
    sweep_interval_minutes: int = 60


settings = Settings()
