"""
Logging configuration: stdout logs, health check suppression, audit lines
"""

from typing import Any, Dict
import logging


HEALTH_PATHS = frozenset({"/health", "/healthz"})


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for GETs on the liveness endpoints."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        # uvicorn passes (client, method, path, http_version, status)
        args = record.args if isinstance(record.args, tuple) else ()
        if len(args) < 3:
            return True
        method, path = args[1], str(args[2]).split("?", 1)[0]
        return not (method == "GET" and path in HEALTH_PATHS)


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with health check suppression."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {
                "()": HealthCheckFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "message": {
                "format": "%(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout"
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "message",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"]
            },
            # Audit entries are already JSON
            "audit": {
                "class": "logging.StreamHandler",
                "formatter": "message",
                "stream": "ext://sys.stdout"
            }
        },
        "loggers": {
            "uvicorn": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.access": {
                "handlers": ["access"],
                "level": "INFO",
                "propagate": False
            },
            "authgate.audit": {
                "handlers": ["audit"],
                "level": "INFO",
                "propagate": False
            },
            "authgate": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }
