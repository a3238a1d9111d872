"""Logging helpers shared by every engine module."""
import logging
from typing import Optional


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for host scripts.

    The library itself never calls this on import.
    """
    if level is None:
        from icope_risk.config import settings
        level = "DEBUG" if settings.debug else settings.log_level
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
