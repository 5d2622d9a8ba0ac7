"""
Logging configuration for the registrations service.

A global level comes from DJANGO_LOG_LEVEL (default INFO); the registrations
app can be tuned separately with REGISTRATIONS_LOG_LEVEL. Everything goes to
the console in a verbose format carrying timestamp, level, logger and line.
"""

import os

LOG_LEVEL = os.getenv("DJANGO_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "[{asctime}] {levelname} [{name}:{lineno}] {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "py.warnings": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
        "registrations": {
            "handlers": ["console"],
            "level": os.getenv("REGISTRATIONS_LOG_LEVEL") or LOG_LEVEL,
            "propagate": False,
        },
    },
}
