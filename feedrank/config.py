# feedrank/config.py
from datetime import timedelta

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+sqlite:///./feedrank.db"

    LOG_LEVEL: str = "INFO"

    WEB_HOST: str = "0.0.0.0"
    WEB_PORT: int = 8000

    RECENT_WINDOW_HOURS: float = 6.0
    RECENT_CAP: int = 3
    SEEN_WEIGHT: float = 0.3
    UNSEEN_WEIGHT: float = 2.0

    FEED_DEFAULT_LIMIT: int = 20
    FEED_MAX_LIMIT: int = 100

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def recent_window(self) -> timedelta:
        return timedelta(hours=self.RECENT_WINDOW_HOURS)

settings = Settings()
