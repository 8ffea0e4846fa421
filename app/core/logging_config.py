"""Logging setup."""

import logging

from app.core.config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once at application start."""
    normalized = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, normalized, logging.INFO),
        format="%(asctime)s %(levelname)s:%(name)s:%(message)s",
    )
