# logging_config.py
"""Console logging for the API, plain text in development and JSON in production."""
import logging.config
from typing import Literal


def setup_logging(
  level: str = "INFO",
  fmt: Literal["plain", "json"] = "plain",
) -> None:
  use_json = fmt == "json"

  logging.config.dictConfig({
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
      "default": {
        "format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s",
      },
      "json": {
        "()": "pythonjsonlogger.json.JsonFormatter",
        "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
      },
    },
    "handlers": {
      "console": {
        "class": "logging.StreamHandler",
        "formatter": "json" if use_json else "default",
        "stream": "ext://sys.stdout",
      },
    },
    "root": {
      "handlers": ["console"],
      "level": level.upper(),
    },
  })
