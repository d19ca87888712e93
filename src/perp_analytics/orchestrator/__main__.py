"""Allow running as: python -m perp_analytics.orchestrator [-r URL] [-c CSV] [-s] [--config path]."""

from perp_analytics.orchestrator.runner import cli

cli()
