"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

from pydantic import BaseModel, Field

# Jupiter Perpetuals program on Solana mainnet. Its live accounts do not use
# the layouts in decoder/layout.py (fixed 32-byte pool name, oracle price
# embedded in Custody, accumulated_fees_usd on Position), so a run against it
# fails on the first Pool decode. Point program.program_id (or
# PERP_PROGRAM_ID) at a deployment that writes those layouts.
DEFAULT_PROGRAM_ID = "PERPHjGBqRHArX4DySjwM6UJHiR3sWAatqfdBS2qQJu"


class RpcConfig(BaseModel):
    url: str = "https://api.mainnet-beta.solana.com"
    timeout_s: float = 30.0
    # getMultipleAccounts accepts at most 100 keys per call.
    batch_size: int = Field(default=100, ge=1, le=100)
    max_concurrency: int = Field(default=4, ge=1)


class ProgramConfig(BaseModel):
    program_id: str = DEFAULT_PROGRAM_ID


class ValuationConfig(BaseModel):
    # None disables the staleness check.
    max_price_age_s: int | None = 300


class ReportConfig(BaseModel):
    csv_path: str | None = None
    silent: bool = False


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"


class AppConfig(BaseModel):
    rpc: RpcConfig = Field(default_factory=RpcConfig)
    program: ProgramConfig = Field(default_factory=ProgramConfig)
    valuation: ValuationConfig = Field(default_factory=ValuationConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
