"""PriceQuantity — exact fixed-point values as (mantissa, exponent) pairs."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, eq=False)
class PriceQuantity:
    """An integer mantissa scaled by a power of ten.

    ``value = mantissa * 10 ** exponent``.  Addition, subtraction and
    comparison first bring both operands to the finer of the two exponents by
    multiplying the coarser mantissa, so nothing is rounded.  Multiplication
    multiplies mantissas and sums exponents.  Python ints are unbounded, so
    rescaling never overflows.
    """

    mantissa: int
    exponent: int = 0

    @classmethod
    def zero(cls, exponent: int = 0) -> PriceQuantity:
        return cls(0, exponent)

    def rescale(self, exponent: int) -> PriceQuantity:
        """Return the same value at a finer (smaller or equal) *exponent*."""
        if exponent > self.exponent:
            raise ValueError(
                f"cannot rescale exponent {self.exponent} to coarser {exponent} without rounding"
            )
        return PriceQuantity(self.mantissa * 10 ** (self.exponent - exponent), exponent)

    def align(self, other: PriceQuantity) -> tuple[int, int, int]:
        """Return ``(self_mantissa, other_mantissa, exponent)`` at a shared exponent."""
        exponent = min(self.exponent, other.exponent)
        return (
            self.rescale(exponent).mantissa,
            other.rescale(exponent).mantissa,
            exponent,
        )

    def __add__(self, other: PriceQuantity) -> PriceQuantity:
        a, b, exponent = self.align(other)
        return PriceQuantity(a + b, exponent)

    def __sub__(self, other: PriceQuantity) -> PriceQuantity:
        a, b, exponent = self.align(other)
        return PriceQuantity(a - b, exponent)

    def __neg__(self) -> PriceQuantity:
        return PriceQuantity(-self.mantissa, self.exponent)

    def __mul__(self, other: PriceQuantity) -> PriceQuantity:
        return PriceQuantity(self.mantissa * other.mantissa, self.exponent + other.exponent)

    def _cmp(self, other: PriceQuantity) -> int:
        a, b, _ = self.align(other)
        return (a > b) - (a < b)

    # Equality is by value, so (5, 0) == (50, -1).
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PriceQuantity):
            return NotImplemented
        return self._cmp(other) == 0

    def __hash__(self) -> int:
        mantissa, exponent = self.mantissa, self.exponent
        if mantissa == 0:
            return hash(0)
        while mantissa % 10 == 0:
            mantissa //= 10
            exponent += 1
        return hash((mantissa, exponent))

    def __lt__(self, other: PriceQuantity) -> bool:
        return self._cmp(other) < 0

    def __le__(self, other: PriceQuantity) -> bool:
        return self._cmp(other) <= 0

    def __gt__(self, other: PriceQuantity) -> bool:
        return self._cmp(other) > 0

    def __ge__(self, other: PriceQuantity) -> bool:
        return self._cmp(other) >= 0

    def sign(self) -> int:
        return (self.mantissa > 0) - (self.mantissa < 0)

    def is_zero(self) -> bool:
        return self.mantissa == 0

    def to_decimal(self) -> Decimal:
        """Exact Decimal form (no context rounding)."""
        digits = tuple(int(d) for d in str(abs(self.mantissa)))
        return Decimal((1 if self.mantissa < 0 else 0, digits, self.exponent))

    def ratio(self, other: PriceQuantity) -> Decimal | None:
        """``self / other`` as a Decimal, or ``None`` when *other* is zero."""
        if other.mantissa == 0:
            return None
        a, b, _ = self.align(other)
        return Decimal(a) / Decimal(b)

    def __repr__(self) -> str:
        return f"PriceQuantity({self.to_decimal()})"
