"""Structured logging."""

from perp_analytics.logging.setup import configure_logging, get_logger, setup_logging

__all__ = ["configure_logging", "get_logger", "setup_logging"]
