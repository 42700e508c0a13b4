"""
Numeric guards shared by the calculators.

Inputs are finite, but sums, products and ratios of very large or very small
values can still leave the float range. These helpers turn that into an
ArithmeticDomainError naming the quantity instead of an OverflowError or inf.
"""

import math
from typing import Iterable

from shared.errors import ArithmeticDomainError


def require_finite(value: float, quantity: str) -> float:
    if not math.isfinite(value):
        raise ArithmeticDomainError(f"{quantity} exceeds the floating-point range")
    return value


def finite_sum(values: Iterable[float], quantity: str) -> float:
    """math.fsum (exact, order-independent) with overflow reported as ArithmeticDomainError."""
    try:
        total = math.fsum(values)
    except OverflowError:
        raise ArithmeticDomainError(f"{quantity} exceeds the floating-point range") from None
    return require_finite(total, quantity)
