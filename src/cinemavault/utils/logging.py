"""Logging configuration for CinemaVault.

stdlib logging owns the handlers (console plus rotating files); structlog
owns the event format. Every event carries ``service="cinemavault"`` and
whatever request context the HTTP middleware bound for the current request.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

SERVICE_NAME = "cinemavault"
LOG_FILE = "cinemavault.log"
ERROR_LOG_FILE = "cinemavault_error.log"

_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5

_LEVEL_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def get_log_level() -> str:
    """``LOG_LEVEL`` if set, otherwise a level derived from the environment name."""
    env = (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()
    return os.getenv("LOG_LEVEL", _LEVEL_BY_ENV.get(env, "INFO")).upper()


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: str | Path = "logs") -> None:
    log_level = get_log_level()

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(_rotating_handler(log_dir / LOG_FILE, log_level))
    root_logger.addHandler(_rotating_handler(log_dir / ERROR_LOG_FILE, logging.ERROR))

    logging.getLogger("protean").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def add_service_name(logger, method_name, event_dict):
    """structlog processor: tag every event with the service name."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_structlog() -> None:
    env = os.getenv("ENVIRONMENT", "development").lower()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_service_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if env in ("production", "staging"):
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | Path = "logs") -> None:
    """Configure stdlib handlers and structlog. Call once at process start."""
    setup_stdlib_logging(log_dir)
    setup_structlog()


def bind_request(request_id: str, actor_id: str | None = None, role: str | None = None) -> None:
    """Bind per-request fields that every log event emitted for this request will carry."""
    structlog.contextvars.clear_contextvars()
    context = {"request_id": request_id}
    if actor_id:
        context["actor_id"] = actor_id
    if role:
        context["actor_role"] = role
    structlog.contextvars.bind_contextvars(**context)


def clear_request() -> None:
    structlog.contextvars.clear_contextvars()
