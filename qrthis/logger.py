"""
Logging configuration for QRThis
"""

import logging
import logging.handlers
from pathlib import Path

import colorlog

LOGGER_NAME = "qrthis"


def setup_logger(config) -> logging.Logger:
    """Configure the ``qrthis`` logger from ``config.logging``.

    Module loggers (``qrthis.generator`` and friends) propagate here.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, config.logging.level.upper(), logging.INFO))

    # Clear existing handlers
    logger.handlers.clear()

    # File handler with rotation
    if config.logging.file:
        log_file = Path(config.logging.file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=parse_size(config.logging.max_size),
            backupCount=config.logging.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(file_handler)

    # Console handler with colors
    if config.logging.console_output:
        console_handler = colorlog.StreamHandler()
        console_handler.setFormatter(colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s - %(levelname)s - %(message)s%(reset)s",
            datefmt="%H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        ))
        logger.addHandler(console_handler)

    return logger


def parse_size(size_str: str) -> int:
    """Parse size string like '10MB' to bytes"""
    size = size_str.strip().upper()
    for suffix, factor in (("GB", 1024 ** 3), ("MB", 1024 ** 2), ("KB", 1024)):
        if size.endswith(suffix):
            return int(size[: -len(suffix)]) * factor
    return int(size)
