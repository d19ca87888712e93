"""Structured logging for the collector.

Records go to stderr (or a given stream) so the console report on stdout
stays clean.  Monetary fields are logged as exact decimal strings.
"""

from __future__ import annotations

import logging
import sys
from decimal import Decimal
from typing import TextIO

import structlog

from perp_analytics.config.schema import LoggingConfig
from perp_analytics.models.quantity import PriceQuantity

# Third-party loggers that log every HTTP request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore")


def exact_amounts(_logger, _method: str, event_dict: dict) -> dict:
    """Render Decimal and PriceQuantity fields as plain decimal strings."""
    for key, value in event_dict.items():
        if isinstance(value, PriceQuantity):
            value = value.to_decimal()
        if isinstance(value, Decimal):
            event_dict[key] = format(value, "f")
    return event_dict


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    stream: TextIO | None = None,
) -> None:
    """Route structlog through stdlib logging with one stream handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: "json" for machine-readable output, "console" for humans.
        stream: Destination stream; defaults to ``sys.stderr``.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            exact_amounts,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(root_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))


def configure_logging(config: LoggingConfig, stream: TextIO | None = None) -> None:
    """Apply the ``logging`` section of the app config."""
    setup_logging(level=config.level, log_format=config.format, stream=stream)


def get_logger(name: str | None = None, **initial_context) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, optionally pre-bound with context."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
