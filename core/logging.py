"""
Unified Logging Configuration

This module sets up a centralized logging system for the client.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Placing order")

Log Levels (from most to least verbose):
    DEBUG    - Request/response diagnostics (method, path, status, timing)
    INFO     - General informational messages (e.g., "Session opened")
    WARNING  - Rejected requests (4xx/5xx)
    ERROR    - Transport failures and undecodable responses

Secrets:
    Credentials, signatures and signed headers are never passed to the logger.
    Request bodies are not logged either, since some (sub-account API keys)
    carry passphrases.

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.
"""

import logging
import sys
from typing import Optional


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the client logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include module name in log messages

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Client started")
        2024-01-01 12:00:00 [INFO] kucoinclient: Client started
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True
    )

    logger = logging.getLogger("kucoinclient")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.log_level if hasattr(settings, 'log_level') else "INFO"
except ImportError:
    log_level = "INFO"

logger = setup_logging(log_level=log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module or component.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Child of the "kucoinclient" logger

    Example:
        # In exchanges/kucoin/api_client.py:
        logger = get_logger(__name__)  # "kucoinclient.exchanges.kucoin.api_client"
    """
    return logging.getLogger(f"kucoinclient.{name}")


def set_log_level(level: str) -> None:
    """
    Change the log level at runtime.

    Args:
        level: New log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(method: str, path: str, body_size: int = 0) -> None:
    """
    Log an outgoing API request with consistent formatting.

    Only the method, path and body length are logged.

    Example:
        >>> log_api_request("POST", "/api/v1/hf/orders", 87)
        [DEBUG] API Request: POST /api/v1/hf/orders | Body: 87 bytes
    """
    if body_size:
        logger.debug(f"API Request: {method} {path} | Body: {body_size} bytes")
    else:
        logger.debug(f"API Request: {method} {path}")


def log_api_response(method: str, path: str, status: int, response_time: float = None) -> None:
    """
    Log an API response with status and timing information.

    Example:
        >>> log_api_response("POST", "/api/v1/hf/orders", 200, 0.342)
        [DEBUG] API Response: POST /api/v1/hf/orders | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {method} {path} | Status: {status}{time_str}")


logger.debug("Logging system initialized")
