"""Loguru setup for the API process."""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> {extra}"
)


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    json_logs: bool = False,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Replace loguru's default sink with the service sinks.

    Keyword context passed to logger calls (user_id, model, error_type, ...)
    ends up in {extra} on the console and as fields in JSON output.

    Args:
        level: Minimum level for every sink
        log_file: Optional path of a rotated log file
        json_logs: Emit one JSON object per line on stderr instead of colored text
        rotation: When to rotate the log file
        retention: How long rotated files are kept
    """
    logger.remove()

    if json_logs:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        # Tracebacks in files never include local variable values (diagnose=False)
        logger.add(
            log_path,
            level=level,
            serialize=json_logs,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.info("Logger configured", level=level, json_logs=json_logs, log_file=log_file or None)
