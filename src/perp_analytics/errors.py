"""Exceptions for the analytics pipeline.

Decoder, resolver and aggregator errors live here so the orchestrator can
tell recoverable per-position failures apart from fatal venue-wide ones.
"""

from __future__ import annotations


class AnalyticsError(Exception):
    """Base exception for all analytics errors."""


class LedgerSourceError(AnalyticsError):
    """Raised when the RPC node cannot list or fetch accounts."""


# ── Decoding ──────────────────────────────────────────────────


class DecodeError(AnalyticsError):
    """A raw account buffer could not be parsed into a typed record."""

    def __init__(
        self,
        message: str,
        *,
        address: str | None = None,
        length: int | None = None,
        expected_kind: str | None = None,
    ) -> None:
        self.address = address
        self.length = length
        self.expected_kind = expected_kind
        details = ", ".join(
            f"{key}={value}"
            for key, value in (
                ("address", address),
                ("length", length),
                ("expected", expected_kind),
            )
            if value is not None
        )
        super().__init__(f"{message} ({details})" if details else message)


class UnknownAccountKind(DecodeError):
    """The discriminator does not match any known (or the expected) account kind."""


class TruncatedBuffer(DecodeError):
    """The buffer is shorter than the account kind's fixed layout."""


class InvalidFieldValue(DecodeError):
    """A field holds a value the layout cannot represent (e.g. side byte 7)."""


# ── Valuation ─────────────────────────────────────────────────


class ResolverError(AnalyticsError):
    """Base for valuation failures."""


class InvalidPrice(ResolverError):
    """A custody's oracle price is zero, negative or stale."""

    def __init__(self, custody: str, reason: str) -> None:
        self.custody = custody
        self.reason = reason
        super().__init__(f"invalid oracle price for custody {custody}: {reason}")


# ── Aggregation ───────────────────────────────────────────────


class AggregationError(AnalyticsError):
    """Base for failures that prevent building a snapshot."""


class EmptyRequiredAccount(AggregationError):
    """A Pool or Custody needed for venue-wide state is missing."""

    def __init__(self, kind: str, address: str | None = None, detail: str = "") -> None:
        self.kind = kind
        self.address = address
        message = f"required {kind} account missing"
        if address:
            message += f": {address}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)
