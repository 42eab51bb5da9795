import sys
import logging
from loguru import logger

from changemakers_api.core.config import settings

# Formatters
CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level:<8}</level> | "
    "<cyan>{file}:{function}:{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | "
    "{file}:{function}:{line} | {message}"
)

# External loggers uvicorn, asyncpg, sqlalchemy ...
EXTERNAL_LOGGERS = [
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "asyncpg",
    "sqlalchemy",
    "sqlalchemy.engine",
]


# Intercept standard logging → loguru
class InterceptHandler(logging.Handler):
    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(level: str | None = None, file_enabled: bool | None = None) -> None:
    """Route application and library logs through loguru sinks."""
    level = (level or settings.logging.level).upper()
    if file_enabled is None:
        file_enabled = settings.logging.file_enabled

    # Remove default handlers
    logger.remove()

    # Console output
    logger.add(
        sys.stdout,
        level=level,
        format=CONSOLE_FORMAT,
        colorize=True,
    )

    # File logging
    if file_enabled:
        log_dir = settings.logging.log_dir
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_dir / "changemakers.log"),
            level=level,
            rotation="5 MB",
            retention=10,
            compression="zip",
            encoding="utf-8",
            format=FILE_FORMAT,
            backtrace=True,
            diagnose=True,
            enqueue=True,
        )

    # Redirect all stdlib logging to loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in EXTERNAL_LOGGERS:
        ext_logger = logging.getLogger(name)
        ext_logger.handlers.clear()
        ext_logger.addHandler(InterceptHandler())
        ext_logger.setLevel(level)
        ext_logger.propagate = False

    logger.debug(f"Logging configured at level {level} (file sink: {file_enabled})")
