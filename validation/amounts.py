"""Decimal amount parsing, precision checks and smallest-unit conversion."""
from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, getcontext, localcontext
from typing import Any, Optional, Union

import config

MAX_DECIMALS = 18

Number = Union[int, float, Decimal]


def is_valid_decimals(decimals: Any) -> bool:
    return isinstance(decimals, int) and not isinstance(decimals, bool) and 0 <= decimals <= MAX_DECIMALS


def parse_amount(value: Any) -> Optional[Decimal]:
    """Parse a number or numeric string into a finite ``Decimal``.

    Strings are parsed directly so no digits are lost before the precision
    check. Floats go through ``repr``, which yields the shortest literal that
    round-trips.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int):
        parsed = Decimal(value)
    elif isinstance(value, float):
        parsed = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    if not parsed.is_finite():
        return None
    return parsed


def fractional_digits(amount: Decimal) -> int:
    """Significant fractional digits, ignoring trailing zeros.

    Counted from the digit tuple rather than ``normalize()``, which would
    round to the context precision first.
    """
    if amount.is_zero():
        return 0
    _, digits, exponent = amount.as_tuple()
    significant = "".join(map(str, digits)).rstrip("0")
    return max(0, -(exponent + len(digits) - len(significant)))


def _precision_for(amount: Decimal, decimals: int) -> int:
    """Context precision at which rescaling ``amount`` to ``decimals`` places is exact."""
    _, digits, exponent = amount.as_tuple()
    integer_digits = max(1, len(digits) + exponent)
    return max(getcontext().prec, integer_digits + max(decimals, -exponent, 0) + 1)


def _check(amount: Optional[Decimal], decimals: int, max_amount: Optional[Number]) -> bool:
    if amount is None or not is_valid_decimals(decimals):
        return False
    if amount <= 0:
        return False
    limit = Decimal(str(config.MAX_AMOUNT if max_amount is None else max_amount))
    if amount >= limit:
        return False
    return fractional_digits(amount) <= decimals


def is_valid_amount(value: Any, decimals: int = 9, *, max_amount: Optional[Number] = None) -> bool:
    return _check(parse_amount(value), decimals, max_amount)


def sanitize_amount(value: Any, decimals: int = 9, *, max_amount: Optional[Number] = None) -> Optional[Decimal]:
    """Validate and round ``value`` to ``decimals`` places; ``None`` when invalid."""
    amount = parse_amount(value)
    if not _check(amount, decimals, max_amount):
        return None
    with localcontext() as ctx:
        ctx.prec = _precision_for(amount, decimals)
        return amount.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_EVEN)


def to_smallest_units(amount: Decimal, decimals: int) -> int:
    """Convert a whole-token amount into integer base units."""
    with localcontext() as ctx:
        ctx.prec = _precision_for(amount, decimals) + decimals
        scaled = amount.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {amount} has more precision than {decimals} decimals allow.")
    return int(scaled)


def from_smallest_units(units: int, decimals: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(getcontext().prec, len(str(abs(units))) + 1)
        return Decimal(units).scaleb(-decimals)
