import json
import logging
from datetime import datetime, timezone
from logging.config import dictConfig

BASE_FIELDS = ("time", "level", "logger", "message")


def setup_logging(level: str = "INFO", storage_level: str | None = None) -> None:
    """Route everything through the JSON console handler.

    ``cube.startup`` keeps a plain one-line format for boot messages.
    ``cube.storage`` follows ``level`` unless ``storage_level`` is given;
    per-call driver traces are emitted at DEBUG there.
    """
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": JsonFormatter},
                "plain": {"format": "%(levelname)s %(name)s: %(message)s"},
            },
            "handlers": {
                "console": {"class": "logging.StreamHandler", "formatter": "json"},
                "startup_console": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                },
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                "cube.startup": {
                    "handlers": ["startup_console"],
                    "level": "INFO",
                    "propagate": False,
                },
                "cube.storage": {"level": storage_level or level},
            },
        }
    )


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Fields passed as ``extra={"extra": {...}}`` are merged in; they never
    replace the base fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            for key, value in extra.items():
                if key not in BASE_FIELDS:
                    payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)
