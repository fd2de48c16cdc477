"""
Credit adjustment for discounted and promotional prices.

The credit grant scales with the share of the list price actually paid and is
rounded up in the user's favor:

    credits = ceil(base_credits * paid_price / list_price)

Products without a list price (unknown, or consumable packs) keep their base
grant, since there is no reference price to compute a ratio against.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, Decimal
from typing import Union

from domain.catalog import DEFAULT_CATALOG, Catalog

Number = Union[Decimal, int, float]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so that 8.995 stays 8.995 instead of its binary expansion
    return Decimal(str(value))


def adjust_credits(
    base_credits: int,
    paid_price: Number,
    product_id: str,
    catalog: Catalog = DEFAULT_CATALOG,
) -> int:
    """
    Prorate base_credits by the price actually paid for product_id.

    Args:
        base_credits: Credits granted at full list price
        paid_price: Amount the user paid (0 for free trials / full promotions);
            NaN or infinity counts as nothing paid
        product_id: Product used to look up the list price
        catalog: Catalog providing list prices

    Returns:
        Non-negative credit amount

    Example:
        adjust_credits(100, Decimal("8.995"), "subscribe.photos_ai_studio.1week_pro")
        # 50 (half of the 17.99 list price)
    """
    list_price = catalog.lookup(product_id).list_price
    if not list_price:
        return base_credits

    paid = _to_decimal(paid_price)
    if not paid.is_finite() or paid <= 0:
        return 0

    adjusted = (Decimal(base_credits) * paid / list_price).to_integral_value(rounding=ROUND_CEILING)
    return max(int(adjusted), 0)


__all__ = [
    "adjust_credits",
]
