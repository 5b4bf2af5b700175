"""
Portal Config - environment settings
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PERSONAL_TRAINING_URL = (
    "https://calendly.com/eackloffpersonaltraining/60-minute-training-auren-co"
)


class PortalSettings(BaseSettings):
    """Portal settings, read from the environment and `.env`"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Supabase
    SUPABASE_URL: str = Field(default="", description="Supabase Project URL")
    SUPABASE_KEY: str = Field(default="", description="Supabase anon key")

    # Session cookie
    SESSION_COOKIE_NAME: str = "access_token"
    SESSION_COOKIE_MAX_AGE: int = 60 * 60 * 24  # 24h
    SESSION_COOKIE_SECURE: bool = False

    # Club pages
    CLUB_NAME: str = "6713"
    PERSONAL_TRAINING_URL: str = DEFAULT_PERSONAL_TRAINING_URL
    ROOM_BOOKING_PROVIDER: str = "Skedda"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = ""

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000


@lru_cache()
def get_settings() -> PortalSettings:
    return PortalSettings()
