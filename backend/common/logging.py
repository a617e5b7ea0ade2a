"""
Logging configuration for the authentication service.

Centralized logging built on loguru. Console output is colorized for local
development, and two rotating file sinks keep a full log and an error-only log
per service.

Log Files:
    - {service_name}.log: All logs at configured level (default: INFO)
    - {service_name}-error.log: Only ERROR level logs

Log Rotation:
    - Error logs: Rotate at 10 MB, retain 30 days, compress with zip
    - General logs: Rotate at 50 MB, retain 7 days, compress with zip

Example:
    ```python
    from common.logging import setup_logging

    setup_logging("auth-service")

    from loguru import logger
    logger.info("Auth service started")
    ```

Note:
    Credentials are never passed to the logger by the auth core; only usernames
    and tenant identifiers appear in log lines.
"""

from pathlib import Path
import sys

from loguru import logger

from common.config import get_settings

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
)


def setup_logging(service_name: str | None = None, log_dir: str | Path = "logs") -> None:
    """
    Configure loguru sinks for the application.

    Args:
        service_name: Optional name of the service (e.g., "auth-service"). Log files
            are named after it; generic names are used when None.
        log_dir: Directory for the log files, created if missing. Relative paths
            are resolved against the current working directory.

    Side Effects:
        - Removes previously installed loguru handlers
        - Adds console, service log and error log handlers
        - Creates the log directory if it doesn't exist

    Note:
        Log level comes from the LOG_LEVEL setting of the service configuration.
    """
    settings = get_settings(service_name)

    # Remove default handler
    logger.remove()

    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>",
        level=settings.LOG_LEVEL,
        colorize=True,
    )

    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    stem = service_name or "app"
    error_stem = f"{service_name}-error" if service_name else "error"

    logger.add(
        logs_dir / f"{error_stem}.log",
        format=LOG_FORMAT,
        level="ERROR",
        rotation="10 MB",
        retention="30 days",
        compression="zip",
    )

    logger.add(
        logs_dir / f"{stem}.log",
        format=LOG_FORMAT,
        level=settings.LOG_LEVEL,
        rotation="50 MB",
        retention="7 days",
        compression="zip",
    )
