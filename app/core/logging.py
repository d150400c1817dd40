import logging.config

from app.core.config import settings


def configure_logging(level: str | None = None) -> None:
    """Console logging for the API and the Celery worker."""
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            "app": {"level": (level or settings.LOG_LEVEL).upper()},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    })
