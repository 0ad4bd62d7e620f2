import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel


class Settings(BaseModel):
    env: str = os.getenv("ENV", "dev")
    port: int = int(os.getenv("PORT", "3000"))
    log_level: str = os.getenv("LOG_LEVEL", "info")

    # Database
    db_url: str | None = os.getenv("DB_URL")
    # Fixed pool size; callers queue for up to db_pool_timeout seconds
    db_pool_size: int = int(os.getenv("DB_POOL_SIZE", "16"))
    db_pool_timeout: float = float(os.getenv("DB_POOL_TIMEOUT", "30"))
    # Create tables on startup (local/dev only, no migrations)
    db_create_schema: bool = os.getenv(
        "DB_CREATE_SCHEMA", "true" if os.getenv("ENV", "dev") == "dev" else "false"
    ).lower() in ("1", "true", "yes")

    # Upper bound for a single orchestration step, lock waits included
    step_timeout_seconds: float = float(os.getenv("STEP_TIMEOUT_SECONDS", "10"))

    # "presence": append history whenever a field is in the patch
    # "change": append only when the value differs from the current one
    history_append_policy: Literal["presence", "change"] = os.getenv(  # type: ignore[assignment]
        "HISTORY_APPEND_POLICY", "presence"
    )

    # Observability
    otel_exporter_otlp_endpoint: str | None = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")


@lru_cache
def get_settings() -> Settings:
    return Settings()
