from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present as early as possible
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore any other env vars we don't model explicitly
    )

    # Web server
    host: str = "0.0.0.0"  # `HOST`
    port: int = 5000  # `PORT`
    log_level: str = "INFO"  # `LOG_LEVEL`

    # Pacing between successful mutations (seconds)
    role_pacing_seconds: float = 0.1  # `ROLE_PACING_SECONDS`
    unban_pacing_seconds: float = 0.5  # `UNBAN_PACING_SECONDS`

    # Response shaping
    error_list_limit: int = 10
    unbanned_list_limit: int = 20
    unban_reason: str = "Bulk unban via API"

    # Session / batch bounds (seconds)
    session_ready_timeout: float = 30.0
    batch_timeout: Optional[float] = None  # `BATCH_TIMEOUT`, unbounded when unset


@lru_cache(maxsize=1)
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance to avoid re-parsing env vars."""

    return Settings()
