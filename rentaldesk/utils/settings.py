"""
RentalDesk Configuration Settings.

Uses Pydantic Settings for type-safe configuration with environment variable support.

Optional environment variables (with defaults):
- RENTALDESK_API_URL: Base URL of the rental backend (default: 'http://localhost:5000')
- RENTALDESK_TIMEOUT: Request timeout in seconds (default: 20)
- RENTALDESK_DEBUG: Enable debug logging (default: false)
- RENTALDESK_MIN_DRIVER_AGE: Minimum age of a customer (default: 18)
- RENTALDESK_MIN_PERMIT_YEARS: Minimum age of a driving permit in years (default: 2)
"""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    # API settings
    api_base_url: str = Field(default='http://localhost:5000', alias='RENTALDESK_API_URL')
    request_timeout: float = Field(default=20.0, alias='RENTALDESK_TIMEOUT')

    # Debug settings
    debug: bool = Field(default=False, alias='RENTALDESK_DEBUG')

    # Form rules
    min_driver_age: int = Field(default=18, alias='RENTALDESK_MIN_DRIVER_AGE')
    min_permit_years: int = Field(default=2, alias='RENTALDESK_MIN_PERMIT_YEARS')

    @field_validator('api_base_url')
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip('/')


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
