"""Loguru sink configuration for the bozo_bets library modules."""
import sys
from pathlib import Path

from loguru import logger


def setup_logging(settings) -> None:
    """Replace loguru's default sink with ones driven by settings."""
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.log_level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
            "<level>{message}</level>"
        ),
        backtrace=settings.debug,
        diagnose=settings.debug,
    )

    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.log_file,
            level="DEBUG" if settings.debug else settings.log_level,
            rotation="10 MB",
            retention="14 days",
            enqueue=True,
        )

    logger.info(f"Logging initialized with level: {settings.log_level}")
