# streamrent/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (preferred when set; bypasses RLS)
      - DEFAULT_ADMIN_PASSWORD (only needed the first time the process
        runs against an empty users table)
    """

    PROJECT_NAME: str = "StreamRent"

    # Supabase config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Local session snapshot
    SESSION_FILE: str = ".streamrent-session.json"
    SESSION_RESTORE_TIMEOUT: float = 5.0

    # Defaults for new accounts
    DEFAULT_CURRENCY: str = "$"

    # Bootstrap admin (see core/bootstrap.py)
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str | None = None
    DEFAULT_ADMIN_FULL_NAME: str = "Main Administrator"

    # Rentals whose expiration is this many days away (or less) count as
    # "expiring soon" in dashboard stats
    RENTAL_EXPIRING_SOON_DAYS: int = 7

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every call.
    """
    return Settings()
