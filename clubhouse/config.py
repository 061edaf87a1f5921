# clubhouse/config.py

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "America/New_York"  # local day used for opening hours

    # Auth
    SECRET_KEY: str = "change-me-later"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # DB
    DATABASE_URL: str = "sqlite:///./clubhouse.db"

    # Friday evenings (None disables the view)
    FRIDAY_EVENING_CLUB_ID: Optional[int] = 1
    FRIDAY_EVENING_START_HOUR: int = 18
    FRIDAY_SIGNUP_START_HOUR: int = 19
    FRIDAY_SIGNUP_DURATION_MINUTES: int = 120
    FRIDAY_MIN_ATTENDANCE: int = 2
    FRIDAYS_TO_SHOW: int = 4


settings = Settings()
