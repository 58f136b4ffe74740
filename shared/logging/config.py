from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(
    service_name: str, log_level: str = "INFO", json_logs: bool = True
) -> None:
    """Configure structlog for the service.

    Must be called once at service startup before any logging occurs.
    Entries are handed to standard library loggers named after the calling
    module, so the root logger level and handlers apply.

    JSON output is the production format; ``json_logs=False`` switches to the
    coloured console renderer for local development. The service name is
    bound to every entry via contextvars.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger().setLevel(level)

    renderer: structlog.typing.Processor = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.ExceptionRenderer(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    structlog.contextvars.bind_contextvars(service=service_name)


def bind_request_context(correlation_id: str, user_id: str | None = None) -> None:
    """Bind per-request context variables to structlog context."""
    structlog.contextvars.bind_contextvars(
        correlation_id=correlation_id,
        user_id=user_id,
    )


def clear_request_context() -> None:
    """Clear per-request context variables after request completes."""
    structlog.contextvars.unbind_contextvars("correlation_id", "user_id")
