"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CardPlatformConfig(BaseSettings):
    """Virtual card platform configuration"""

    model_config = SettingsConfigDict(
        env_prefix="VCARD_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Database configuration
    database_url: str = "sqlite:///card_platform.db"  # memory:// for in-memory storage

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Balance mutation retry configuration
    max_retry_attempts: int = 3
    retry_base_delay_ms: int = 10


# Global configuration instance
config = CardPlatformConfig()


def get_config() -> CardPlatformConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> CardPlatformConfig:
    """Reload configuration from environment"""
    global config
    config = CardPlatformConfig()
    return config
