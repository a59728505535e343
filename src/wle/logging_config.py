import logging
from logging.config import dictConfig
from pathlib import Path

from .config import settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"


def setup_logging() -> None:
    """Configure the root logger."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": LOG_FORMAT
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": level,
            }
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
    }

    dictConfig(config)


def add_run_log_file(path: Path) -> logging.Handler:
    """Mirror root log records into a per-run log file.

    The caller owns the returned handler and should pass it to
    ``remove_run_log_file`` when the run ends.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(handler)
    return handler


def remove_run_log_file(handler: logging.Handler) -> None:
    logging.getLogger().removeHandler(handler)
    handler.close()


__all__ = ["setup_logging", "add_run_log_file", "remove_run_log_file"]
