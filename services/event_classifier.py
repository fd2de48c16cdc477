"""
Event classification.

Maps a BillingEvent's type onto the decision path the entitlement resolver
takes. Pure; no catalog access and no side effects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from domain.billing_event import BillingEvent, BillingEventType


@dataclass(frozen=True, slots=True)
class StandardPurchase:
    """Initial purchase, renewal or one-off purchase."""

    is_renewal: bool = False


@dataclass(frozen=True, slots=True)
class PlanChange:
    """Switch from one subscription product to another."""


@dataclass(frozen=True, slots=True)
class Ignore:
    """Event type that never produces a ledger change."""

    reason: str


ClassifiedEvent = Union[StandardPurchase, PlanChange, Ignore]

_PURCHASE_TYPES = frozenset(
    {
        BillingEventType.INITIAL_PURCHASE,
        BillingEventType.RENEWAL,
        BillingEventType.NON_RENEWING_PURCHASE,
    }
)


def classify(event: BillingEvent) -> ClassifiedEvent:
    if event.type in _PURCHASE_TYPES:
        return StandardPurchase(is_renewal=event.type is BillingEventType.RENEWAL)
    if event.type is BillingEventType.PRODUCT_CHANGE:
        return PlanChange()
    if event.type in (BillingEventType.CANCELLATION, BillingEventType.EXPIRATION):
        # Revocation is not handled; absence of an intent means "no ledger change".
        return Ignore(reason=f"{event.type.value.lower()} does not change the ledger")
    return Ignore(reason=f"unhandled event type {event.raw_type or event.type.value!r}")


__all__ = [
    "StandardPurchase",
    "PlanChange",
    "Ignore",
    "ClassifiedEvent",
    "classify",
]
