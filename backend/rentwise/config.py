"""
Configuration settings for Rentwise.
"""
from pathlib import Path
from typing import List
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_DATA_DIR = Path(__file__).parent / "db" / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RENTWISE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Data store
    database_path: Path = _DATA_DIR / "rentwise.db"

    # Object storage for property images
    storage_dir: Path = _DATA_DIR / "storage"
    media_url: str = "/media"

    # Auth
    jwt_secret: str = "rentwise-dev-jwt-secret-change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiration: int = 86400  # 24 hours

    # HTTP
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    log_level: str = "INFO"

    # Property search / rent status
    default_max_rent: float = 10000
    due_soon_days: int = 7


@lru_cache()
def get_settings() -> Settings:
    return Settings()
