"""Application configuration loaded from environment variables and .env file."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Reputation engine tunables
    BILL_MAGNITUDE: float = 5.0
    NEWS_DECAY_RATE: float = 0.20
    SCANDAL_DECAY_RATE: float = 0.25
    SCANDAL_DECAY_INTERVAL: int = 3
    DECAY_THRESHOLD: float = 0.1
    NATURAL_DRIFT_RATE: float = 0.0
    REPUTATION_UPDATE_FREQUENCY: int = 3
    CUBE_WEIGHT: float = 1.0
    RNG_SEED: Optional[int] = None


settings = Settings()
