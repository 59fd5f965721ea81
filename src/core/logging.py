"""
Loguru configuration shared by the API and background callers.
"""

import sys

from loguru import logger

from .config import settings

_configured = False


def setup_logging(level: str | None = None, serialize: bool | None = None):
    """
    Configure the global loguru logger once and return it.

    Keyword context passed to log calls (``logger.info("msg", key=value)``)
    lands in ``record["extra"]`` and is rendered after the message.
    """
    global _configured
    if _configured and level is None and serialize is None:
        return logger

    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.log_level).upper(),
        serialize=settings.log_json if serialize is None else serialize,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
            "<level>{message}</level> {extra}"
        ),
    )
    _configured = True
    return logger
