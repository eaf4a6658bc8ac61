# barberbook/config.py

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage
    DATABASE_URL: str = "sqlite:///./barberbook.db"
    SQL_ECHO: bool = False          # set to True to see SQL
    SQLITE_BUSY_TIMEOUT: float = 30.0  # seconds a writer waits for the lock

    # Tokens
    SECRET_KEY: str = "change-me-later"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30

    # Booking rules
    SLOT_MINUTES: int = 15
    ENFORCE_STATUS_TRANSITIONS: bool = False

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
