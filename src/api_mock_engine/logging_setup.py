"""Central logging configuration.

Applies a root stdout handler so all module loggers emit without per-module
setup, and routes uvicorn's loggers through the same handler.
"""

import logging
from logging.config import dictConfig

FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"


def _dict_config(level: str) -> dict:
    console = {"level": level, "handlers": ["console"], "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": dict(console),
            "uvicorn.error": dict(console),
            "uvicorn.access": dict(console),
        },
    }


def configure_logging(level: str = "INFO") -> None:
    """Configure application-wide logging once.

    If the root logger already has handlers, only adjust its level so
    repeated calls (tests, reloaders) do not duplicate output.
    """
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    dictConfig(_dict_config(level))
