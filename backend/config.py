# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    # Signing key for the session cookie
    SECRET_KEY: str = "dev-secret-change-me"
    SESSION_COOKIE: str = "session"
    SESSION_MAX_AGE: int = 14 * 24 * 60 * 60

    LOG_LEVEL: str = "INFO"
    APP_TITLE: str = "Tienda"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
