"""Structured logging for the catalog service.

structlog renders both its own events and stdlib records (uvicorn, SQLAlchemy)
through one stdout handler. Request context bound via structlog.contextvars
(request_id, method, path, username) is merged into every event, and keys that
name a credential are masked before anything is rendered.
"""

import logging
import logging.config
import sys
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from structlog.stdlib import BoundLogger

SERVICE_NAME = "storemanager"
REDACTED = "[redacted]"
SENSITIVE_KEYS = ("authorization", "password", "secret")


class LoggingSettings(BaseSettings):
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # key=value console lines instead of JSON, for local development
    log_console: bool = Field(default=False, alias="LOG_CONSOLE")
    # Turned off in tests so structlog.testing.capture_logs sees every logger
    log_cache_loggers: bool = Field(default=True, alias="LOG_CACHE_LOGGERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


def add_service_fields(
    _logger: object,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Stamp the service name and an ISO 8601 UTC timestamp."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def redact_sensitive(
    _logger: object,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Mask the value of any key that names a credential, e.g. ``admin_password``."""
    for key in event_dict:
        if any(marker in key.lower() for marker in SENSITIVE_KEYS):
            event_dict[key] = REDACTED
    return event_dict


def _shared_processors() -> list[Any]:
    # Runs for structlog events and, via foreign_pre_chain, for stdlib records.
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_service_fields,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_sensitive,
    ]


def configure_logging(settings: LoggingSettings) -> None:
    """Configure structlog and the root stdlib logger. Safe to call again."""
    shared = _shared_processors()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=settings.log_cache_loggers,
    )

    renderer: Any = (
        structlog.dev.ConsoleRenderer(colors=False)
        if settings.log_console
        else structlog.processors.JSONRenderer()
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                    "foreign_pre_chain": shared,
                },
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "structured",
                    "stream": sys.stdout,
                },
            },
            "root": {"handlers": ["stdout"], "level": settings.log_level},
            # uvicorn installs its own handlers; route its records through ours instead
            "loggers": {
                name: {"handlers": [], "propagate": True}
                for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
            },
        }
    )


configure_logging(LoggingSettings())


def get_logger(name: str) -> BoundLogger:
    """Structured logger for ``name``, typically ``__name__``.

    Example:
        logger = get_logger(__name__)
        logger.info("product_created", product_id=7)
        # {"event": "product_created", "product_id": 7, "service": "storemanager", ...}
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]
