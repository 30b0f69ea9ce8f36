"""API configuration via environment variables."""

from __future__ import annotations

from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_OPENFLIGHTS_URL = (
    "https://raw.githubusercontent.com/jpatokal/openflights/master/data/airports.dat"
)


class ApiSettings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    database_url: str = "sqlite+aiosqlite:///./airports.db"

    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0
    redis_socket_timeout: float = 2.0

    # Upstream catalog feed
    airports_data_url: str = _OPENFLIGHTS_URL
    import_timeout: float = 60.0
    import_max_retries: int = 2
    import_retry_delay: float = 1.0
    import_batch_size: int = 1000

    # Comma-separated in the environment
    valid_api_keys: Annotated[list[str], NoDecode] = ["default-api-key"]
    admin_api_keys: Annotated[list[str], NoDecode] = []

    # Main airport advisor; an empty key disables it
    anthropic_api_key: str = ""
    llm_model: str = "claude-haiku-4-5-20251001"
    llm_timeout: float = 5.0
    llm_max_tokens: int = 10
    llm_temperature: float = 0.0
    llm_max_concurrency: int = 4

    # Cache TTLs in seconds
    airport_cache_ttl: int = 600  # 10 min
    search_cache_ttl: int = 300  # 5 min
    stats_cache_ttl: int = 3600  # 1 hour
    main_airport_cache_ttl: int = 3600  # 1 hour

    top_countries_limit: int = 10
    city_candidate_limit: int = 200

    model_config = SettingsConfigDict(
        env_prefix="API_", env_file=".env", extra="ignore"
    )

    @field_validator("valid_api_keys", "admin_api_keys", mode="before")
    @classmethod
    def _split_keys(cls, value: object) -> object:
        if isinstance(value, str):
            return [key.strip() for key in value.split(",") if key.strip()]
        return value

    @property
    def redis_url(self) -> str:
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def effective_admin_keys(self) -> list[str]:
        """Admin keys, falling back to the client keys when none are set."""
        return self.admin_api_keys or self.valid_api_keys


settings = ApiSettings()
