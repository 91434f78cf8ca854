"""Logging setup: console plus a daily-rotated server.log."""
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_NAME = "server.log"


def configure_logging(settings) -> None:
    """Configure root logging from settings. Safe to call more than once."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_dir:
        log_dir = Path(settings.log_dir).expanduser()
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            TimedRotatingFileHandler(
                log_dir / LOG_FILE_NAME,
                when="midnight",
                backupCount=14,
                encoding="utf-8",
            )
        )
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    # SQL echo goes through the sqlalchemy.engine logger when enabled.
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
