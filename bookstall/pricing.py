"""
Price calculations and amount formatting
"""
import math
from typing import Any


def to_amount(raw: Any) -> float:
    """
    Coerce a loosely-typed feed value into a float.
    
    Missing, non-numeric and NaN values become 0.0. Strings may carry
    thousands separators ("12,000").
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, str):
        raw = raw.strip().replace(",", "")
        if not raw:
            return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def effective_price(listed_amount: Any, discount_percent: Any) -> float:
    """
    Unit price after applying a percentage discount.
    
    Args:
        listed_amount: Listed price
        discount_percent: Discount in percent; values <= 0 leave the price unchanged
    
    Returns:
        Effective unit price, never negative
    """
    listed = to_amount(listed_amount)
    discount = to_amount(discount_percent)
    if discount > 0:
        listed = listed - listed * discount / 100
    return max(0.0, listed)


def format_amount(value: float) -> str:
    """Display form: thousands separators, decimals only when needed"""
    value = to_amount(value)
    if value == int(value):
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_fixed(value: float) -> str:
    """Two-decimal fixed form used on the wire"""
    return f"{to_amount(value):.2f}"
