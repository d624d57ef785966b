"""
Structured logging for the EvenTaro API, built on structlog.

Every record, whether it comes from our own structlog loggers or from
stdlib loggers (uvicorn, SQLAlchemy), goes through one ProcessorFormatter:
JSON lines in production, a coloured console layout elsewhere. The request
middleware binds request_id/method/path into contextvars, so they show up on
every line written while a request is served.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, WrappedLogger

from eventaro.core.config import get_settings

# Third-party loggers and the level below which their records are dropped
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,  # the middleware writes its own access line
    "sqlalchemy.engine": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "multipart": logging.INFO,
}

# Let uvicorn's own records reach the root handler instead of its defaults
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _add_service(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    settings = get_settings()
    event_dict.setdefault("service", settings.APP_NAME)
    event_dict.setdefault("env", settings.ENVIRONMENT)
    return event_dict


def _renderer(production: bool):
    if production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging() -> None:
    settings = get_settings()
    production = settings.ENVIRONMENT == "production"

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if production:
        # Tracebacks become a string field in the JSON line
        shared_processors += [_add_service, structlog.processors.format_exc_info]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(production),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
