"""Shared test fixtures."""

import logging

import pytest
import structlog

from perp_analytics.logging import setup_logging
from perp_analytics.orchestrator import build_snapshot
from tests.builders import (
    NOW,
    build_pool,
    build_position,
    build_short_position,
    raw_account,
    scenario_custodies,
)


@pytest.fixture(autouse=True)
def reset_logging():
    """Send fixture-time logs to stderr; drop handlers bound to captured streams after."""
    setup_logging(level="INFO", log_format="console")
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


@pytest.fixture
def scenario_snapshot():
    """Snapshot of the two-position reference scenario."""
    return build_snapshot(
        [raw_account(build_pool())],
        [raw_account(c) for c in scenario_custodies()],
        [raw_account(build_position()), raw_account(build_short_position())],
        now=NOW,
    )
