"""
Environment configuration for the HACCP review engine.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

import json
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import List, Set, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from haccp_review.models.base.enums import RootCause

TREND_WINDOW_LIMIT = 36

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


def _split_list(v: Union[str, List[str], Set[str]]) -> List[str]:
    """Accept a JSON array or a comma separated string from the environment"""
    if isinstance(v, str):
        if v.startswith('[') and v.endswith(']'):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in v.split(",") if item.strip()]
    return list(v)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application configuration
    APP_NAME: str = "HACCP Review Engine"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = Field(default=["*"], alias="BACKEND_CORS_ORIGINS")

    # Database configuration
    DATABASE_URL: str = "sqlite:///./haccp_review.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_POOL_OVERFLOW: int = 5

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"
    LOG_JSON: bool = False
    SENTRY_DSN: Optional[str] = None

    # Notification dispatch rules
    NOTIFICATION_RATING_THRESHOLD: Decimal = Decimal("3.5")
    CRITICAL_RATING_THRESHOLD: Decimal = Decimal("2.0")
    CRITICAL_ROOT_CAUSES: Set[str] = Field(
        default={"temperature_storage", "cross_contamination"}
    )

    # Compliance trends
    TREND_DEFAULT_MONTHS: int = 6
    TREND_MAX_MONTHS: int = 36

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS_ORIGINS from string to list"""
        return _split_list(v)

    @field_validator('CRITICAL_ROOT_CAUSES', mode='before')
    @classmethod
    def parse_critical_root_causes(cls, v: Union[str, List[str], Set[str]]) -> Set[str]:
        """Parse CRITICAL_ROOT_CAUSES from string to set of known root causes"""
        causes = set(_split_list(v))
        unknown = sorted(causes - {cause.value for cause in RootCause})
        if unknown:
            raise ValueError(f"unknown root causes: {', '.join(unknown)}")
        return causes

    @field_validator('TREND_MAX_MONTHS')
    @classmethod
    def validate_trend_max_months(cls, v: int) -> int:
        if v < 1 or v > TREND_WINDOW_LIMIT:
            raise ValueError(f"TREND_MAX_MONTHS must lie within 1 and {TREND_WINDOW_LIMIT}")
        return v

    @model_validator(mode='after')
    def validate_trend_default_months(self) -> "Settings":
        if self.TREND_DEFAULT_MONTHS < 1 or self.TREND_DEFAULT_MONTHS > self.TREND_MAX_MONTHS:
            raise ValueError("TREND_DEFAULT_MONTHS must lie within 1 and TREND_MAX_MONTHS")
        return self

    @field_validator('CRITICAL_RATING_THRESHOLD', 'NOTIFICATION_RATING_THRESHOLD')
    @classmethod
    def validate_rating_threshold(cls, v: Decimal) -> Decimal:
        if v < 0 or v > 5:
            raise ValueError("rating thresholds must lie within 0.0 and 5.0")
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
