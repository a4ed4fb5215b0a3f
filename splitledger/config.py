"""Configuration management"""

from decimal import Decimal
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Ledger
    balance_tolerance: Decimal = Decimal("0.01")
    recent_settlements_limit: int = 5

    # Redis (display-only cache for running group totals)
    redis_url: str = "redis://localhost:6379/0"
    cache_enabled: bool = True
    cache_ttl_seconds: int = 3600

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name"""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a standard logging level, got {v}")
        return level

    @field_validator("balance_tolerance")
    @classmethod
    def validate_balance_tolerance(cls, v: Decimal) -> Decimal:
        """Validate tolerance is non-negative"""
        if v < 0:
            raise ValueError("BALANCE_TOLERANCE cannot be negative")
        return v

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        """Validate Redis URL scheme"""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("REDIS_URL must be a redis:// connection string")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
