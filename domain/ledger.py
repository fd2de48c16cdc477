"""
Domain: Ledger update intents.

Contract excerpts implemented here:
- Every intent's user_id satisfies the UUID shape predicate before it reaches
  the Ledger Gateway. A failing user id is a hard error, never coerced.
- credit_delta and model_slot_delta are never negative (no clawback).
- Intents are immutable and consumed exactly once by the Ledger Gateway.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


class InvalidUserIdError(ValueError):
    """Raised when a ledger intent is built for a user id that is not a UUID."""

    def __init__(self, user_id: object) -> None:
        super().__init__(f"user_id is not a valid UUID: {user_id!r}")
        self.user_id = user_id


def is_valid_uuid(value: object) -> bool:
    """UUID shape check (versions 1-5, RFC 4122 variant)."""

    return isinstance(value, str) and _UUID_PATTERN.match(value) is not None


@dataclass(frozen=True, slots=True)
class LedgerUpdateIntent:
    """Concrete credit/model-slot change to apply for one billing transaction."""

    user_id: str
    transaction_id: str
    credit_delta: int
    model_slot_delta: int
    product_id: str
    expiration_date: date
    is_consumable: bool = False
    is_renewal: bool = False
    is_upgrade: bool = False

    def __post_init__(self) -> None:
        if not is_valid_uuid(self.user_id):
            raise InvalidUserIdError(self.user_id)
        if self.credit_delta < 0:
            raise ValueError("credit_delta must be >= 0")
        if self.model_slot_delta < 0:
            raise ValueError("model_slot_delta must be >= 0")


__all__ = [
    "InvalidUserIdError",
    "is_valid_uuid",
    "LedgerUpdateIntent",
]
