"""
Webhook processing service.

Handles:
- Classification of the inbound billing event
- Entitlement resolution against the configured catalog
- Handing the resulting intent to the Ledger Gateway

No retries happen here: a failure propagates so the billing provider
redelivers the webhook, and the gateway's transaction-id idempotency makes the
redelivery safe.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from domain.billing_event import BillingEvent
from domain.catalog import DEFAULT_CATALOG, Catalog
from domain.ledger import LedgerUpdateIntent
from services.entitlement_resolver import DecisionObserver, log_decision, resolve
from services.event_classifier import classify

LedgerCommitter = Callable[[LedgerUpdateIntent], Any]


@dataclass(frozen=True, slots=True)
class ProcessingResult:
    """
    Outcome of processing one billing event.

    intent: The ledger change decided for the event (None when ignored)
    committed: True if the intent was handed to the Ledger Gateway
    """
    intent: Optional[LedgerUpdateIntent]
    committed: bool


def process_billing_event(
    event: BillingEvent,
    *,
    commit: LedgerCommitter,
    catalog: Catalog = DEFAULT_CATALOG,
    observer: Optional[DecisionObserver] = log_decision,
) -> ProcessingResult:
    """
    Resolve a billing event and commit the resulting ledger update.

    Args:
        event: Validated billing event
        commit: Ledger Gateway call (e.g. ledger_repository.commit_ledger_update)
        catalog: Product catalog
        observer: Receives the resolver's decision trace

    Returns:
        ProcessingResult

    Raises:
        InvalidUserIdError: If the event's user id is not a UUID
        LedgerUpdateError: If the Ledger Gateway fails
    """
    classified = classify(event)
    intent = resolve(event, classified, catalog=catalog, observer=observer)

    if intent is None:
        return ProcessingResult(intent=None, committed=False)

    commit(intent)
    return ProcessingResult(intent=intent, committed=True)


__all__ = [
    "LedgerCommitter",
    "ProcessingResult",
    "process_billing_event",
]
