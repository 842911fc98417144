"""
Line item pricing.

These functions are pure and are the only place totals are derived, so a stored
booking total is always a deterministic function of its stored inputs.
"""

from typing import Iterable, Optional, Protocol, Tuple


class PricedLine(Protocol):
    price_type: str
    unit_price: Optional[float]
    units: Optional[float]
    custom_price: Optional[float]
    discount_amount: Optional[float]


def calculate_item_total(item: PricedLine) -> float:
    """
    fixed               -> unit_price - discount
    per_unit / per_hour -> unit_price * units - discount
    anything else       -> custom_price - discount
    Missing inputs count as 0 and the result is clamped at 0.
    """
    discount = item.discount_amount or 0
    if item.price_type == "fixed":
        base = item.unit_price or 0
    elif item.price_type in ("per_unit", "per_hour"):
        base = (item.unit_price or 0) * (item.units or 0)
    else:
        base = item.custom_price or 0
    return max(0.0, base - discount)


def apply_discount(subtotal: float, discount_amount: Optional[float]) -> float:
    return max(0.0, subtotal - (discount_amount or 0))


def booking_totals(item_totals: Iterable[float], discount_amount: Optional[float]) -> Tuple[float, float]:
    """Returns (subtotal, total) for a booking."""
    subtotal = float(sum(item_totals))
    return subtotal, apply_discount(subtotal, discount_amount)
