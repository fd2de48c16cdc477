"""
Plan comparison for subscription product changes.

Tiers are compared only inside one plan family. Unknown products count as
tier 0 with no family, so:
- unknown -> known is an upgrade (any positive tier beats 0)
- unknown -> unknown is never an upgrade
- known -> known across families is never an upgrade
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from domain.catalog import DEFAULT_CATALOG, Catalog


class PlanChangeDirection(str, Enum):
    UPGRADE = "upgrade"
    DOWNGRADE = "downgrade"
    LATERAL = "lateral"
    CROSS_FAMILY = "cross_family"


def compare_plans(
    current_product_id: Optional[str],
    new_product_id: Optional[str],
    catalog: Catalog = DEFAULT_CATALOG,
) -> PlanChangeDirection:
    """
    Classify a change from current_product_id to new_product_id.

    Example:
        compare_plans("subscribe.photos_ai_studio.1week_basic",
                      "subscribe.photos_ai_studio.1week_pro")
        # PlanChangeDirection.UPGRADE
    """
    current = catalog.lookup(current_product_id)
    new = catalog.lookup(new_product_id)

    if current.is_known and new.is_known and current.family != new.family:
        return PlanChangeDirection.CROSS_FAMILY

    if new.tier > current.tier:
        return PlanChangeDirection.UPGRADE
    if new.tier < current.tier:
        return PlanChangeDirection.DOWNGRADE
    return PlanChangeDirection.LATERAL


def is_upgrade(
    current_product_id: Optional[str],
    new_product_id: Optional[str],
    catalog: Catalog = DEFAULT_CATALOG,
) -> bool:
    """True iff moving to new_product_id is a same-family (or from-unknown) tier increase."""

    return compare_plans(current_product_id, new_product_id, catalog) is PlanChangeDirection.UPGRADE


__all__ = [
    "PlanChangeDirection",
    "compare_plans",
    "is_upgrade",
]
