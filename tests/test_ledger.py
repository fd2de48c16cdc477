"""
Tests for `domain/ledger.py`.

Covers contract rules:
- A LedgerUpdateIntent can only be built for a UUID-shaped user id.
- Credit and model-slot deltas are never negative.
- Intents are immutable.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from domain.ledger import InvalidUserIdError, LedgerUpdateIntent, is_valid_uuid


def _intent(**overrides) -> LedgerUpdateIntent:
    fields = dict(
        user_id="123e4567-e89b-42d3-a456-426614174000",
        transaction_id="txn-1",
        credit_delta=100,
        model_slot_delta=2,
        product_id="subscribe.photos_ai_studio.1week_pro",
        expiration_date=date(2025, 1, 8),
    )
    fields.update(overrides)
    return LedgerUpdateIntent(**fields)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("123e4567-e89b-42d3-a456-426614174000", True),
        ("123E4567-E89B-12D3-A456-426614174000", True),
        ("6f1c2b7a-3d4e-5f60-9a1b-2c3d4e5f6a7b", True),
        ("not-a-uuid", False),
        ("", False),
        ("123e4567-e89b-62d3-a456-426614174000", False),
        ("123e4567-e89b-42d3-c456-426614174000", False),
        ("123e4567e89b42d3a456426614174000", False),
        ("$RCAnonymousID:4a8b3c2d1e0f", False),
        (None, False),
    ],
)
def test_is_valid_uuid(value, expected: bool) -> None:
    """Verify the UUID shape predicate (versions 1-5, RFC 4122 variant, any case)."""

    assert is_valid_uuid(value) is expected


def test_intent_rejects_invalid_user_id() -> None:
    """Verify a non-UUID user id is a hard validation error, not coerced."""

    with pytest.raises(InvalidUserIdError) as exc_info:
        _intent(user_id="not-a-uuid")

    assert exc_info.value.user_id == "not-a-uuid"
    assert isinstance(exc_info.value, ValueError)


def test_intent_rejects_negative_deltas() -> None:
    """Verify intents never carry negative credit or model-slot deltas."""

    with pytest.raises(ValueError):
        _intent(credit_delta=-1)
    with pytest.raises(ValueError):
        _intent(model_slot_delta=-1)


def test_intent_defaults_flags_to_false() -> None:
    """Verify consumable, renewal and upgrade flags default to False."""

    intent = _intent()

    assert intent.is_consumable is False
    assert intent.is_renewal is False
    assert intent.is_upgrade is False


def test_intent_is_immutable() -> None:
    """Verify LedgerUpdateIntent cannot be mutated after creation."""

    intent = _intent()

    with pytest.raises(FrozenInstanceError):
        intent.credit_delta = 1  # type: ignore[misc]
