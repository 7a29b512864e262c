"""
structlog setup shared by the API and the recalculation script.

Events are dotted names (`sale.created`, `cascade.day_failed`) with the
request ID merged in from contextvars. LOG_FORMAT picks the renderer:
`json` (default) for deployed environments, `console` for a terminal.
"""

import contextvars
import logging
import logging.config
import os

import structlog

NO_REQUEST_ID = "no-request-id"

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default=NO_REQUEST_ID
)


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)
    structlog.contextvars.bind_contextvars(request_id=request_id)


def _renderer(log_format: str):
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    renderer = _renderer(os.getenv("LOG_FORMAT", "json").lower())

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn and sqlalchemy log through stdlib; give them the same format
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                    "foreign_pre_chain": shared_processors,
                },
            },
            "handlers": {
                "stdout": {
                    "level": level,
                    "class": "logging.StreamHandler",
                    "formatter": "structlog",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {"handlers": ["stdout"], "level": level},
            "loggers": {
                "uvicorn.access": {"level": "WARNING"},
            },
        }
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
