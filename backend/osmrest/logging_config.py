"""Console logging setup shared by the app and the uvicorn server."""

import logging.config
import sys


def setup_logging(level: str = "INFO") -> None:
    """Route application and uvicorn loggers to one console handler."""
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "[%(asctime)s] %(levelname)s [%(name)s:%(lineno)d] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "detailed",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            "": {
                "level": level,
                "handlers": ["console"],
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            # Requests are logged by the app's access middleware
            "uvicorn.access": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }
    logging.config.dictConfig(config)
