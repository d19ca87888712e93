"""Orchestrator runner — fetch once, build the snapshot, hand it to the report sinks."""

from __future__ import annotations

import argparse
import asyncio
import sys
import time

import structlog

from perp_analytics.config.loader import load_config
from perp_analytics.config.schema import AppConfig
from perp_analytics.errors import AnalyticsError
from perp_analytics.logging.setup import configure_logging
from perp_analytics.models.snapshot import AnalyticsSnapshot
from perp_analytics.orchestrator.snapshot import build_snapshot
from perp_analytics.report.console import render_snapshot
from perp_analytics.report.csv_export import append_snapshot_csv
from perp_analytics.rpc.client import SolanaRpcClient
from perp_analytics.rpc.source import LedgerAccountSource

log = structlog.get_logger("orchestrator")


async def collect_snapshot(
    config: AppConfig,
    client: SolanaRpcClient | None = None,
    now: int | None = None,
) -> AnalyticsSnapshot:
    """Fetch all venue accounts and build one snapshot from that batch."""
    own_client = client is None
    if client is None:
        client = SolanaRpcClient(rpc_url=config.rpc.url, timeout=config.rpc.timeout_s)
    source = LedgerAccountSource(
        client,
        program_id=config.program.program_id,
        batch_size=config.rpc.batch_size,
        max_concurrency=config.rpc.max_concurrency,
    )
    try:
        pools = await source.fetch("Pool")
        custodies = await source.fetch("Custody")
        positions = await source.fetch("Position")
    finally:
        if own_client:
            await client.close()

    return build_snapshot(
        pools,
        custodies,
        positions,
        now=int(time.time()) if now is None else now,
        max_price_age_s=config.valuation.max_price_age_s,
    )


def publish(snapshot: AnalyticsSnapshot, config: AppConfig) -> None:
    if not config.report.silent:
        print(render_snapshot(snapshot))
    if config.report.csv_path:
        append_snapshot_csv(config.report.csv_path, snapshot)
        log.info("csv_row_appended", path=config.report.csv_path)


def main(
    config_path: str | None = None,
    *,
    rpc_url: str | None = None,
    csv_path: str | None = None,
    silent: bool = False,
) -> int:
    """Entry point — load config, apply CLI overrides, run once.  Returns the exit code."""
    config = load_config(config_path)
    if rpc_url:
        config.rpc.url = rpc_url
    if csv_path:
        config.report.csv_path = csv_path
    if silent:
        config.report.silent = True
    configure_logging(config.logging)

    log.info("run_started", rpc_url=config.rpc.url, program_id=config.program.program_id)
    try:
        snapshot = asyncio.run(collect_snapshot(config))
    except AnalyticsError:
        log.exception("snapshot_failed")
        return 1

    try:
        publish(snapshot, config)
    except OSError:
        log.exception("report_failed", csv_path=config.report.csv_path)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="perp-analytics",
        description="Collects analytics about perpetuals venue usage",
    )
    parser.add_argument("-r", "--rpc-url", default=None, help="Solana RPC URL")
    parser.add_argument("-c", "--csv-path", default=None, help="Append the snapshot to this CSV")
    parser.add_argument("-s", "--silent", action="store_true", help="Do not print the report")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    return parser


def cli(argv: list[str] | None = None) -> None:
    """Console-script entry point."""
    args = build_parser().parse_args(argv)
    sys.exit(
        main(
            config_path=args.config,
            rpc_url=args.rpc_url,
            csv_path=args.csv_path,
            silent=args.silent,
        )
    )
