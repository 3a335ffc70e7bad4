# /app/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    PROJECT_NAME: str = "GigFinder Messaging API"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Gig conversations, band invitations and notifications"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    REDIS_HOST: str
    REDIS_PORT: int
    DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"
    LOG_LEVEL: str = "INFO"

    INVITATION_TTL_DAYS: int = 7
    APPLICATION_TTL_DAYS: int = 14
    # pending invitations past expires_at stay acceptable unless disabled
    ALLOW_EXPIRED_ACCEPT: bool = True

    PROFILE_FETCH_ATTEMPTS: int = 3
    PROFILE_FETCH_BACKOFF_SECONDS: float = 1.0

    model_config = SettingsConfigDict(env_file=".env", extra="allow")
