"""
Entitlement resolution.

Turns a classified BillingEvent into the LedgerUpdateIntent to commit, or None
when the event must not change the ledger.

Decision rules:
- Ignore: no intent.
- StandardPurchase: the effective product (new_product_id when present) grants
  its model slots and its credits. Consumable packs grant their base credits;
  subscriptions are prorated by the price paid.
- PlanChange: skipped when the period had already expired at event time.
  Upgrades grant the new plan's prorated credits; any other change records the
  new plan's base credits unadjusted (already granted credits are never reduced).

Every call reports one DecisionTrace to the injected observer. This module does
not log; log_decision is the default observer used by the webhook service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional

from domain.billing_event import BillingEvent
from domain.catalog import DEFAULT_CATALOG, Catalog
from domain.ledger import LedgerUpdateIntent
from services.credit_adjuster import adjust_credits
from services.event_classifier import ClassifiedEvent, Ignore, PlanChange, StandardPurchase
from services.plan_comparator import PlanChangeDirection, compare_plans

logger = logging.getLogger(__name__)


class DecisionBranch(str, Enum):
    IGNORED = "ignored"
    STANDARD_PURCHASE = "standard_purchase"
    CONSUMABLE_PURCHASE = "consumable_purchase"
    PLAN_CHANGE_UPGRADE = "plan_change_upgrade"
    PLAN_CHANGE_DOWNGRADE = "plan_change_downgrade"
    PLAN_CHANGE_STALE = "plan_change_stale"


@dataclass(frozen=True, slots=True)
class DecisionTrace:
    """What the resolver saw, which branch it took, and what it produced."""

    transaction_id: str
    event_type: str
    branch: DecisionBranch
    product_id: Optional[str] = None
    direction: Optional[PlanChangeDirection] = None
    base_credits: Optional[int] = None
    price_paid: Optional[Decimal] = None
    intent: Optional[LedgerUpdateIntent] = None
    reason: Optional[str] = None


DecisionObserver = Callable[[DecisionTrace], None]


def _discard(trace: DecisionTrace) -> None:
    return None


def log_decision(trace: DecisionTrace) -> None:
    """Default observer: one structured log record per resolved event."""

    intent = trace.intent
    logger.info(
        f"Resolved {trace.event_type} {trace.transaction_id} via {trace.branch.value}",
        extra={
            "transaction_id": trace.transaction_id,
            "event_type": trace.event_type,
            "branch": trace.branch.value,
            "product_id": trace.product_id,
            "direction": trace.direction.value if trace.direction else None,
            "base_credits": trace.base_credits,
            "price_paid": str(trace.price_paid) if trace.price_paid is not None else None,
            "credit_delta": intent.credit_delta if intent else None,
            "model_slot_delta": intent.model_slot_delta if intent else None,
            "reason": trace.reason,
        },
    )


def _resolve_purchase(
    event: BillingEvent,
    classified: StandardPurchase,
    catalog: Catalog,
) -> tuple[LedgerUpdateIntent, DecisionTrace]:
    product_id = event.effective_product_id
    entry = catalog.lookup(product_id)

    if entry.is_consumable:
        credit_delta = entry.base_credits
        branch = DecisionBranch.CONSUMABLE_PURCHASE
    else:
        credit_delta = adjust_credits(entry.base_credits, event.price_paid, product_id, catalog)
        branch = DecisionBranch.STANDARD_PURCHASE

    intent = LedgerUpdateIntent(
        user_id=event.user_id,
        transaction_id=event.transaction_id,
        credit_delta=credit_delta,
        model_slot_delta=entry.model_slots,
        product_id=product_id,
        expiration_date=event.expiration_date,
        is_consumable=entry.is_consumable,
        is_renewal=classified.is_renewal,
        is_upgrade=False,
    )
    trace = DecisionTrace(
        transaction_id=event.transaction_id,
        event_type=event.type.value,
        branch=branch,
        product_id=product_id,
        base_credits=entry.base_credits,
        price_paid=event.price_paid,
        intent=intent,
    )
    return intent, trace


def _resolve_plan_change(
    event: BillingEvent,
    catalog: Catalog,
) -> tuple[Optional[LedgerUpdateIntent], DecisionTrace]:
    new_product_id = event.new_product_id or ""

    if event.is_stale:
        return None, DecisionTrace(
            transaction_id=event.transaction_id,
            event_type=event.type.value,
            branch=DecisionBranch.PLAN_CHANGE_STALE,
            product_id=new_product_id,
            price_paid=event.price_paid,
            reason=(
                f"expired {event.event_epoch_millis - event.expiration_epoch_millis}ms "
                "before the event was emitted"
            ),
        )

    direction = compare_plans(event.product_id, new_product_id, catalog)
    entry = catalog.lookup(new_product_id)

    if direction is PlanChangeDirection.UPGRADE:
        credit_delta = adjust_credits(entry.base_credits, event.price_paid, new_product_id, catalog)
        branch = DecisionBranch.PLAN_CHANGE_UPGRADE
    else:
        credit_delta = entry.base_credits
        branch = DecisionBranch.PLAN_CHANGE_DOWNGRADE

    intent = LedgerUpdateIntent(
        user_id=event.user_id,
        transaction_id=event.transaction_id,
        credit_delta=credit_delta,
        model_slot_delta=entry.model_slots,
        product_id=new_product_id,
        expiration_date=event.expiration_date,
        is_consumable=False,
        is_renewal=False,
        is_upgrade=branch is DecisionBranch.PLAN_CHANGE_UPGRADE,
    )
    trace = DecisionTrace(
        transaction_id=event.transaction_id,
        event_type=event.type.value,
        branch=branch,
        product_id=new_product_id,
        direction=direction,
        base_credits=entry.base_credits,
        price_paid=event.price_paid,
        intent=intent,
    )
    return intent, trace


def resolve(
    event: BillingEvent,
    classified: ClassifiedEvent,
    catalog: Catalog = DEFAULT_CATALOG,
    observer: Optional[DecisionObserver] = None,
) -> Optional[LedgerUpdateIntent]:
    """
    Decide the ledger update for a classified billing event.

    Args:
        event: Validated billing event
        classified: Result of event_classifier.classify(event)
        catalog: Product catalog used for entitlements and prices
        observer: Receives the DecisionTrace for this call

    Returns:
        LedgerUpdateIntent, or None when the ledger must not change

    Raises:
        InvalidUserIdError: If an intent would be produced for a non-UUID user id
    """
    notify = observer or _discard

    if isinstance(classified, Ignore):
        notify(
            DecisionTrace(
                transaction_id=event.transaction_id,
                event_type=event.raw_type or event.type.value,
                branch=DecisionBranch.IGNORED,
                product_id=event.product_id,
                reason=classified.reason,
            )
        )
        return None

    if isinstance(classified, PlanChange):
        intent, trace = _resolve_plan_change(event, catalog)
    elif isinstance(classified, StandardPurchase):
        intent, trace = _resolve_purchase(event, classified, catalog)
    else:
        raise TypeError(f"Unsupported classification: {classified!r}")

    notify(trace)
    return intent


__all__ = [
    "DecisionBranch",
    "DecisionTrace",
    "DecisionObserver",
    "log_decision",
    "resolve",
]
