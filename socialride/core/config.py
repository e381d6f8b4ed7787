# socialride/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - JWT_SECRET (HMAC secret used to sign and verify session tokens)

    Optional:
      - DATABASE_URL (defaults to a local SQLite file)
      - ADMIN_USERNAMES / ADMIN_SUBJECTS (JSON lists, e.g. '["kabamaru"]')
      - FEDERATION_API_KEY (shared key the social-login gateway must send)
    """

    PROJECT_NAME: str = "SocialRide Identity API"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str = "sqlite:///./socialride.db"

    # Token signing (process-wide, read-only after startup)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    # Access token lifetimes per login flow
    FEDERATED_ACCESS_TOKEN_TTL_SECONDS: int = 60 * 60
    LOCAL_ACCESS_TOKEN_TTL_SECONDS: int = 24 * 60 * 60

    # Principals that receive the admin marker claim.
    # Usernames are compared after normalization (strip + lower).
    ADMIN_USERNAMES: list[str] = []
    ADMIN_SUBJECTS: list[str] = []

    FEDERATION_API_KEY: str | None = None

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
