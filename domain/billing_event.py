"""
Domain: Billing events.

A BillingEvent is one subscription-commerce notification (purchase, renewal,
plan change, cancellation, ...) after it has been validated at the HTTP
boundary. Optional provider fields are resolved here once, so decision logic
never performs presence checks of its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from .time import utc_date_from_epoch_millis


class BillingEventType(str, Enum):
    INITIAL_PURCHASE = "INITIAL_PURCHASE"
    RENEWAL = "RENEWAL"
    NON_RENEWING_PURCHASE = "NON_RENEWING_PURCHASE"
    PRODUCT_CHANGE = "PRODUCT_CHANGE"
    CANCELLATION = "CANCELLATION"
    EXPIRATION = "EXPIRATION"
    OTHER = "OTHER"

    @staticmethod
    def parse(raw: Optional[str]) -> "BillingEventType":
        """
        Resolve a provider event type string.

        Unrecognized (or missing) types map to OTHER rather than raising: the
        provider adds new event types over time and they must be ignorable.
        """

        if not raw:
            return BillingEventType.OTHER
        try:
            return BillingEventType(raw.strip().upper())
        except ValueError:
            return BillingEventType.OTHER


class Environment(str, Enum):
    PRODUCTION = "PRODUCTION"
    SANDBOX = "SANDBOX"


@dataclass(frozen=True, slots=True)
class BillingEvent:
    """
    Immutable, validated billing event.

    user_id is carried as received; it is validated when a ledger intent is
    built from it, not here (ignorable events may carry any user id).
    """

    type: BillingEventType
    user_id: str
    transaction_id: str
    product_id: str
    expiration_epoch_millis: int
    event_epoch_millis: int
    new_product_id: Optional[str] = None
    price_paid: Decimal = Decimal("0")
    environment: Environment = Environment.PRODUCTION
    raw_type: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.transaction_id or not self.transaction_id.strip():
            raise ValueError("transaction_id must be a non-empty string")

    @property
    def effective_product_id(self) -> str:
        """The plan the event applies to: new_product_id when present, else product_id."""

        return self.new_product_id or self.product_id

    @property
    def expiration_date(self) -> date:
        return utc_date_from_epoch_millis(self.expiration_epoch_millis)

    @property
    def is_stale(self) -> bool:
        """True when the entitlement period had already lapsed when the event was emitted."""

        return self.expiration_epoch_millis < self.event_epoch_millis


__all__ = [
    "BillingEventType",
    "Environment",
    "BillingEvent",
]
