"""Configuration management using pydantic-settings."""
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Routing
    api_prefix: str = "/api/matches"

    # Placeholder labels for matches created without venue/competition
    default_venue: str = "Stadium"
    default_competition: str = "Friendly Match"

    # Browser origins allowed to call the API and open streams
    cors_origins: List[str] = ["http://localhost:3000"]

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
