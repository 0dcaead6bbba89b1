"""
Logging configuration for the application.

One stdout handler on the root logger. Provider client libraries are noisy
at INFO, so they are capped separately from the application level.
"""

import logging
import sys
from typing import Optional

from folio.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Loggers of third-party clients used by the market data providers
THIRD_PARTY_LEVELS = {
    "uvicorn": logging.INFO,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "yfinance": logging.WARNING,
}


def setup_logging(level: Optional[str] = None) -> None:
    """Configure application logging. ``level`` overrides LOG_LEVEL."""
    level_name = (level or settings.LOG_LEVEL).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name, third_party_level in THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(third_party_level)

    # DEBUG raises only the application's own loggers, not the clients above
    if settings.DEBUG:
        logging.getLogger("folio").setLevel(logging.DEBUG)
