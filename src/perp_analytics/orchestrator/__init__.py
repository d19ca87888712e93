"""Orchestrator — fetches account batches, builds the snapshot, publishes reports."""

from perp_analytics.orchestrator.snapshot import build_snapshot

__all__ = ["build_snapshot"]
