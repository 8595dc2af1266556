import sys
from typing import Optional

from loguru import logger

from catalog.config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(level: Optional[str] = None) -> None:
    """Install the application sink at the configured level.

    Args:
        level (str, optional): Overrides settings.log_level. Defaults to None.
    """
    logger.remove()
    logger.configure(extra={"name": "catalog"})
    logger.add(
        sink=sys.stderr,
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        backtrace=False,
        diagnose=settings.debug,
    )


def get_logger(name: Optional[str] = None):
    """Get the application logger, bound to `name` when given."""
    if name:
        return logger.bind(name=name)
    return logger
