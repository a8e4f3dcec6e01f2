from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./ambientchat.db"
    flush_interval_seconds: float = 5.0
    eager_flush: bool = True
    search_feed_limit: int = 30
    api_prefix: str = "/api"
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
