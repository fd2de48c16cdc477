"""
Tests for `repositories/ledger_repository.py`.

Covers:
- RPC parameter serialization (YYYY-MM-DD expiration, optional upgrade flag).
- One RPC call per intent against the configured function.
- Error responses, APIError and transport errors surface as LedgerUpdateError.
"""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from domain.ledger import LedgerUpdateIntent
from repositories.ledger_repository import LedgerUpdateError, build_rpc_params, commit_ledger_update

INTENT = LedgerUpdateIntent(
    user_id="123e4567-e89b-42d3-a456-426614174000",
    transaction_id="txn-7",
    credit_delta=51,
    model_slot_delta=2,
    product_id="subscribe.photos_ai_studio.1week_pro",
    expiration_date=date(2025, 1, 8),
    is_consumable=False,
    is_renewal=False,
    is_upgrade=True,
)


def _client(response=None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    execute = client.rpc.return_value.execute
    if error is not None:
        execute.side_effect = error
    else:
        execute.return_value = response
    return client


def test_build_rpc_params() -> None:
    """Verify every intent field maps onto the RPC's named parameters."""

    assert build_rpc_params(INTENT) == {
        "p_user_id": "123e4567-e89b-42d3-a456-426614174000",
        "p_transaction_id": "txn-7",
        "p_coin_amount": 51,
        "p_models": 2,
        "p_product_id": "subscribe.photos_ai_studio.1week_pro",
        "p_expiration_date": "2025-01-08",
        "p_is_consumable": False,
        "p_is_renewal": False,
        "p_is_upgrade": True,
    }


def test_build_rpc_params_without_upgrade_flag() -> None:
    """Verify p_is_upgrade can be omitted for ledger functions that predate it."""

    assert "p_is_upgrade" not in build_rpc_params(INTENT, include_upgrade_flag=False)


def test_commit_calls_rpc_once() -> None:
    """Verify a successful commit issues one RPC call and returns its data."""

    client = _client(SimpleNamespace(data={"success": True}, error=None))

    result = commit_ledger_update(INTENT, client=client, rpc_name="process_transaction")

    client.rpc.assert_called_once_with("process_transaction", build_rpc_params(INTENT))
    assert result == {"success": True}


def test_commit_raises_on_error_response() -> None:
    """Verify an error attribute on the response is a hard failure."""

    client = _client(SimpleNamespace(data=None, error="duplicate key"))

    with pytest.raises(LedgerUpdateError):
        commit_ledger_update(INTENT, client=client)


def test_commit_wraps_api_error() -> None:
    """Verify postgrest APIError surfaces as LedgerUpdateError."""

    client = _client(error=APIError({"message": "function does not exist", "code": "42883"}))

    with pytest.raises(LedgerUpdateError):
        commit_ledger_update(INTENT, client=client)


def test_commit_wraps_transport_error() -> None:
    """Verify an unreachable ledger surfaces as LedgerUpdateError."""

    client = _client(error=httpx.ConnectError("connection refused"))

    with pytest.raises(LedgerUpdateError):
        commit_ledger_update(INTENT, client=client)
