"""
Logging for the cluster_config service and the uvicorn server in front of it.
"""

import logging
import logging.config
from typing import Any, Dict

HEALTH_PATHS = ("/healthz", "/health")

SERVICE_LOGGERS = ("clusterconfig", "uvicorn", "uvicorn.error")


class HealthCheckFilter(logging.Filter):
    """Drops uvicorn access lines for GET requests to the health routes."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        # uvicorn passes (client, method, path, http_version, status)
        if isinstance(record.args, tuple) and len(record.args) >= 3:
            method, path = record.args[1], str(record.args[2]).split("?")[0]
            return not (method == "GET" and path in HEALTH_PATHS)
        message = record.getMessage()
        return not ("GET" in message and any(f"{path} " in message for path in HEALTH_PATHS))


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """dictConfig for the service loggers, with health checks kept out of the access log."""
    loggers = {
        name: {"handlers": ["stdout"], "level": level, "propagate": False}
        for name in SERVICE_LOGGERS
    }
    loggers["uvicorn.access"] = {"handlers": ["access"], "level": level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"health_check_filter": {"()": HealthCheckFilter}},
        "formatters": {
            "service": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "service",
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "service",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"],
            },
        },
        "loggers": loggers,
        "root": {"level": level, "handlers": ["stdout"]},
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(get_logging_config(level))
