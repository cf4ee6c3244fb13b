"""Configuracion centralizada de logging."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class LoggingConfig:
    """Logging parameters."""

    level: str = "WARNING"
    format: str = DEFAULT_FORMAT
    console: bool = True
    file: str | None = None


def setup_logging(
    config: LoggingConfig, logger_name: str | None = "hourly_glucose"
) -> logging.Logger:
    """Set up logging for the application.

    Args:
        config: Logging configuration.
        logger_name: Logger to configure; ``None`` configures the root logger.

    Returns:
        Configured logger instance.
    """
    level = getattr(logging, config.level.upper())
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    logger.handlers.clear()

    formatter = logging.Formatter(config.format)

    if config.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
