"""Loguru sink configuration."""

import sys

from loguru import logger

from focusplan.core.config import Settings, get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(settings: Settings | None = None, level: str | None = None) -> None:
    """Configure loguru based on settings.

    Replaces the default handler with a stderr sink and, when
    ``focusplan_log_file`` is set, a daily-rotated file sink.

    Args:
        settings: Settings to read; defaults to the cached instance.
        level: Overrides the configured level (debug mode still wins).
    """
    settings = settings or get_settings()
    if settings.focusplan_debug:
        level = "DEBUG"
    else:
        level = level or settings.focusplan_log_level

    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        colorize=True,
    )

    if settings.focusplan_log_file:
        logger.add(
            settings.focusplan_log_file,
            rotation="1 day",
            retention="7 days",
            level=level,
            format=LOG_FORMAT,
        )
