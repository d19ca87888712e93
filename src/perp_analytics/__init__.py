"""Portfolio-wide analytics for an on-chain perpetuals venue."""

__version__ = "0.1.0"
