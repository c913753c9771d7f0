"""
Logging configuration for foretell.

Uses loguru for structured logging with rotation and retention.
"""

import sys
import time
from typing import Optional

from loguru import logger

import foretell.config.settings as settings_module
from foretell.config.settings import ForetellSettings


def setup_logging(
    config: Optional[ForetellSettings] = None, level: Optional[str] = None
) -> None:
    """Configure logging based on settings.

    Sets up:
    - Console output with color and formatting
    - File output with rotation and retention under the cache directory

    Should be called once at application startup.

    Args:
        config: Settings to read from (the global settings if None)
        level: Console level overriding ``config.log_level``
    """
    if config is None:
        config = settings_module.settings

    console_level = level or config.log_level

    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        level=console_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        colorize=True,
    )

    if config.log_to_file:
        log_dir = config.logs_dir
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Cannot create log directory {}: {}", log_dir, exc)
        else:
            logger.add(
                log_dir / "foretell_{time:YYYY-MM-DD}.log",
                level="DEBUG",
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {thread.name} | {name}:{function}:{line} - {message}",
                rotation=config.log_rotation,
                retention=config.log_retention,
                compression="gz",
                enqueue=True,
            )

    logger.debug("Logging initialized (level={})", console_level)


def get_logger(name: str):
    """Get a logger instance for a specific module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance

    Example:
        >>> from foretell.core.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Fetching set {}", set_code)
    """
    return logger.bind(module=name)


class log_operation:
    """Context manager for logging operations with timing.

    Example:
        >>> with log_operation("Sync pass", cache_dir="/tmp/foretell"):
        ...     coordinator.run()
        # Logs: "Sync pass [cache_dir=/tmp/foretell] completed in 2.34s"
    """

    def __init__(self, operation: str, **context):
        self.operation = operation
        self.context = context
        self.start_time = None

    def _context_str(self) -> str:
        return " ".join(f"{k}={v}" for k, v in self.context.items())

    def __enter__(self):
        self.start_time = time.monotonic()
        logger.info("{} [{}] starting...", self.operation, self._context_str())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.monotonic() - self.start_time

        if exc_type is None:
            logger.info(
                "{} [{}] completed in {:.2f}s",
                self.operation,
                self._context_str(),
                duration,
            )
        else:
            logger.error(
                "{} [{}] failed after {:.2f}s: {}",
                self.operation,
                self._context_str(),
                duration,
                exc_val,
            )

        return False  # Don't suppress exceptions
