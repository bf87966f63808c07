"""
Configuration Management Module

This module handles loading, validating, and providing access to client configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Keeps API secrets out of logs (only presence is reported)
- Provides type-safe access to configuration values
- Handles optional settings with sensible defaults

Usage:
    from core.config import settings

    print(settings.kucoin_base_url)
    print(settings.has_credentials)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Client Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        kucoin_base_url: Base URL for the KuCoin REST API
        kucoin_api_key: API key
        kucoin_api_secret: API secret (HMAC key for request signing)
        kucoin_api_passphrase: API passphrase chosen when the key was created
        kucoin_key_version: Value sent in the KC-API-KEY-VERSION header
        request_timeout: Timeout for HTTP requests in seconds
        environment: Current environment (development, production)
        log_level: Logging level
    """

    # ============================================
    # KuCoin API Configuration
    # ============================================

    kucoin_base_url: str = Field(
        default="https://api.kucoin.com",
        description="KuCoin REST API base URL"
    )

    kucoin_api_key: str = Field(
        default="",
        description="KuCoin API key"
    )

    kucoin_api_secret: str = Field(
        default="",
        description="KuCoin API secret"
    )

    kucoin_api_passphrase: str = Field(
        default="",
        description="KuCoin API passphrase"
    )

    kucoin_key_version: str = Field(
        default="3",
        description="API key version sent in KC-API-KEY-VERSION"
    )

    # ============================================
    # Application Configuration
    # ============================================

    environment: str = Field(
        default="development",
        description="Application environment (development, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    request_timeout: int = Field(
        default=10,
        description="HTTP request timeout in seconds"
    )

    # ============================================
    # Pydantic Settings Configuration
    # ============================================

    model_config = SettingsConfigDict(
        # Look for .env file in the project root
        env_file=".env",
        # Ignore extra fields in .env that aren't defined here
        extra="ignore",
        # Case-insensitive environment variable matching
        case_sensitive=False
    )

    @property
    def has_credentials(self) -> bool:
        """True if all three API credentials are configured."""
        return all((self.kucoin_api_key, self.kucoin_api_secret, self.kucoin_api_passphrase))


# ============================================
# Global Settings Instance
# ============================================

settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration(config: Settings = None) -> None:
    """
    Validate critical configuration settings.

    Args:
        config: Settings to check (defaults to the global instance)

    Raises:
        ValueError: If configuration is missing or invalid
    """
    # Import logger here to avoid circular import
    # (logging.py imports config.py, so we can't import at module level)
    from core.logging import logger

    config = config or settings

    if not config.kucoin_base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid KUCOIN_BASE_URL: '{config.kucoin_base_url}'. Must start with http:// or https://"
        )

    # Either all three credentials or none
    provided = [bool(config.kucoin_api_key), bool(config.kucoin_api_secret), bool(config.kucoin_api_passphrase)]
    if any(provided) and not all(provided):
        raise ValueError(
            "KUCOIN_API_KEY, KUCOIN_API_SECRET and KUCOIN_API_PASSPHRASE must be set together"
        )

    if config.request_timeout <= 0:
        raise ValueError(f"Invalid REQUEST_TIMEOUT: {config.request_timeout}. Must be positive")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    logger.info("Configuration validated successfully")
    logger.info(f"KuCoin API: {config.kucoin_base_url}")
    logger.info(f"Credentials configured: {config.has_credentials}")
    logger.info(f"Log level: {config.log_level.upper()}")
