"""Offer-form checks for SOL/fiat amounts and quoted exchange rates.

Each check returns ``None`` when the input is acceptable, otherwise a message
suitable for showing next to the offending form field.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Optional

import config

from .amounts import parse_amount

logger = logging.getLogger(__name__)


def _trading_settings(trading: Optional[config.TradingSettings]) -> config.TradingSettings:
    return trading or config.settings.trading


def _fmt(value: float) -> str:
    return f"{value:g}"


def validate_sol_amount(value: Any, trading: Optional[config.TradingSettings] = None) -> Optional[str]:
    limits = _trading_settings(trading)
    amount = parse_amount(value)
    if amount is None:
        return "Please enter a valid number"
    if amount <= 0:
        return "SOL amount must be greater than 0"
    if amount < Decimal(str(limits.sol_min)):
        return f"Minimum SOL amount is {_fmt(limits.sol_min)}"
    if amount > Decimal(str(limits.sol_max)):
        return f"Maximum SOL amount is {_fmt(limits.sol_max)}"
    return None


def validate_fiat_amount(
    value: Any,
    currency: str = "USD",
    trading: Optional[config.TradingSettings] = None,
) -> Optional[str]:
    limits = _trading_settings(trading)
    amount = parse_amount(value)
    if amount is None:
        return "Please enter a valid number"
    if amount <= 0:
        return "Fiat amount must be greater than 0"

    if currency == "JPY":
        minimum, maximum = limits.jpy_min, limits.jpy_max
    else:
        minimum, maximum = limits.fiat_min, limits.fiat_max

    if amount < Decimal(str(minimum)):
        return f"Minimum amount is {_fmt(minimum)} {currency}"
    if amount > Decimal(str(maximum)):
        return f"Maximum amount is {_fmt(maximum)} {currency}"
    return None


def validate_market_rate(
    sol_amount: Any,
    fiat_amount: Any,
    currency: str,
    market_prices: Optional[Mapping[str, float]] = None,
    trading: Optional[config.TradingSettings] = None,
) -> Optional[str]:
    """Flag quotes whose implied SOL price strays too far from the market.

    Incomplete input is not this check's concern and passes. With a live
    ``market_prices`` entry for ``currency`` the quote must sit within the
    configured tolerance of it; otherwise a static per-currency band is used.
    """
    limits = _trading_settings(trading)
    sol = parse_amount(sol_amount)
    fiat = parse_amount(fiat_amount)
    if sol is None or fiat is None or sol <= 0 or fiat <= 0:
        return None

    rate = float(fiat / sol)

    market_rate = (market_prices or {}).get(currency)
    if market_rate:
        tolerance = limits.rate_tolerance
        if rate < market_rate * (1 - tolerance):
            return (
                f"Rate seems unusually low ({rate:.2f} {currency}/SOL vs market {market_rate:.2f}). "
                "Please verify."
            )
        if rate > market_rate * (1 + tolerance):
            return (
                f"Rate seems unusually high ({rate:.2f} {currency}/SOL vs market {market_rate:.2f}). "
                "Please verify."
            )
        return None

    band = limits.fallback_rates.get(currency)
    if band is None:
        logger.debug("No fallback rate band for %s; using USD band", currency)
        band = limits.fallback_rates["USD"]
    low, high = band
    if rate < low:
        return f"Rate seems unusually low ({rate:.2f} {currency}/SOL). Please verify."
    if rate > high:
        return f"Rate seems unusually high ({rate:.2f} {currency}/SOL). Please verify."
    return None
