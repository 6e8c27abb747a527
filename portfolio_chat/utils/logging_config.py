"""
Logging setup for the portfolio chat package.

The configured level applies to the `portfolio_chat` logger tree only. AWS SDK and HTTP client
loggers stay at WARNING or above so request bodies (prompts, credentials) are never echoed.
Output goes to stderr, which keeps stdout free for the MCP stdio transport.
"""

import logging
import sys
from typing import Optional

from .config import AppConfig

PACKAGE_LOGGER = 'portfolio_chat'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

QUIET_LOGGERS = ('botocore', 'boto3', 'urllib3', 'httpx')


def setup_logging(config: Optional[AppConfig] = None) -> None:
    """
    Configure the package logger and quiet the SDK loggers.

    Args:
        config: AppConfig instance, uses default if None
    """
    if config is None:
        from .config import config as default_config
        config = default_config

    level = getattr(logging, config.log_level.upper())

    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT, handlers=[logging.StreamHandler(sys.stderr)])
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the package tree.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger that inherits the package level
    """
    if name == '__main__':
        name = f'{PACKAGE_LOGGER}.main'
    return logging.getLogger(name)
