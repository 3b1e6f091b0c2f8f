"""
Application configuration settings.
"""
import logging
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Dashboard settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Dashboard server
    HOST: str = "0.0.0.0"
    PORT: int = 7860
    DEBUG: bool = False

    # Refresh loop
    REFRESH_INTERVAL_SECONDS: float = Field(10.0, gt=0)
    HISTORY_SIZE: int = Field(30, ge=1)

    # Generator policies
    RANDOM_SEED: Optional[int] = None  # unseeded unless set
    CLAMP_CONFIDENCE: bool = True
    ELECTRICITY_MODEL: Literal["sequential", "categorical"] = "sequential"

    # Filter defaults
    RISK_THRESHOLD: int = Field(60, ge=0, le=100)
    CONFIDENCE_THRESHOLD: float = Field(0.90, ge=0, le=1)

    # External generative service
    API_KEY: str = ""

    LOG_LEVEL: str = "INFO"

    @property
    def assistant_configured(self) -> bool:
        return bool(self.API_KEY)

    @property
    def refresh_interval_ms(self) -> int:
        return int(self.REFRESH_INTERVAL_SECONDS * 1000)


# Global settings instance
settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Install the root log format; *level* defaults to ``LOG_LEVEL``."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
