"""
Structured logging configuration using structlog.

Two kinds of loggers feed the same output:
- API routes log key/value events through ``structlog.get_logger``.
- Domain services (ledger, registry, settlement...) use plain
  ``logging.getLogger(__name__)`` with %-style messages.

Both are rendered by one ``ProcessorFormatter`` on the root handler: JSON
lines in production, colored console output elsewhere. The request
middleware binds ``request_id`` into the context, so domain log lines
emitted while serving a request carry it too.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from src.config.settings import Settings, get_settings

# Third-party loggers that are too chatty at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "redis", "uvicorn.access")


def _renderer(settings: Settings) -> Processor:
    if settings.is_production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging() -> None:
    """
    Configure structlog and route stdlib logging through it.

    Safe to call more than once; the root handler is replaced each time.

    Usage:
        setup_logging()
        logger = structlog.get_logger(__name__)
        logger.info("Signal filed", signal_id="s_m1abc_x9z2", beat="bitcoin-macro")
    """
    settings = get_settings()
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)

    # Applied to both structlog events and foreign (stdlib) records
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info
            if settings.is_production
            else structlog.processors.UnicodeDecoder(),
            _renderer(settings),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**kwargs) -> None:
    """
    Bind context variables to all subsequent log messages.

    Args:
        **kwargs: Key-value pairs to bind (e.g. request_id)
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
