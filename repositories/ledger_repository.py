"""
Ledger repository (persistence).

This module provides *only* the persistence call for LedgerUpdateIntent: one
Supabase RPC per intent. It does not decide entitlements. Idempotency keyed on
p_transaction_id is enforced by the database function, so redelivered webhooks
are safe to commit again.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError

from domain.ledger import LedgerUpdateIntent
from repositories.client import get_supabase

logger = logging.getLogger(__name__)

# Supabase database function applying a credit transaction.
# Keep this aligned with your database schema.
_LEDGER_RPC: str = "process_transaction"


class LedgerUpdateError(RuntimeError):
    """Raised when the ledger RPC fails or cannot be reached."""


def build_rpc_params(intent: LedgerUpdateIntent, include_upgrade_flag: bool = True) -> dict[str, Any]:
    """Serialize an intent into the RPC's named parameters."""

    params: dict[str, Any] = {
        "p_user_id": intent.user_id,
        "p_transaction_id": intent.transaction_id,
        "p_coin_amount": intent.credit_delta,
        "p_models": intent.model_slot_delta,
        "p_product_id": intent.product_id,
        "p_expiration_date": intent.expiration_date.isoformat(),
        "p_is_consumable": intent.is_consumable,
        "p_is_renewal": intent.is_renewal,
    }
    if include_upgrade_flag:
        params["p_is_upgrade"] = intent.is_upgrade
    return params


def commit_ledger_update(
    intent: LedgerUpdateIntent,
    client: Optional[Any] = None,
    rpc_name: str = _LEDGER_RPC,
    include_upgrade_flag: bool = True,
) -> Any:
    """
    Apply a ledger update through the Supabase RPC.

    Args:
        intent: Ledger change to apply
        client: Supabase client (default: the process-wide client)
        rpc_name: Database function to call
        include_upgrade_flag: Send p_is_upgrade (older functions do not accept it)

    Returns:
        The RPC's response data

    Raises:
        LedgerUpdateError: If the RPC returns an error or raises APIError
    """
    db = client if client is not None else get_supabase()
    params = build_rpc_params(intent, include_upgrade_flag=include_upgrade_flag)

    logger.info(
        f"Committing ledger update for transaction {intent.transaction_id}",
        extra={
            "transaction_id": intent.transaction_id,
            "product_id": intent.product_id,
            "credit_delta": intent.credit_delta,
            "model_slot_delta": intent.model_slot_delta,
            "is_upgrade": intent.is_upgrade,
            "is_renewal": intent.is_renewal,
            "is_consumable": intent.is_consumable,
        },
    )

    try:
        response = db.rpc(rpc_name, params).execute()
    except APIError as e:
        raise LedgerUpdateError(f"Failed to commit ledger update {intent.transaction_id}: {e}") from e
    except httpx.HTTPError as e:
        raise LedgerUpdateError(f"Ledger RPC unreachable for {intent.transaction_id}: {e}") from e

    error = getattr(response, "error", None)
    if error:
        raise LedgerUpdateError(f"Failed to commit ledger update {intent.transaction_id}: {error}")

    return getattr(response, "data", None)


__all__ = [
    "LedgerUpdateError",
    "build_rpc_params",
    "commit_ledger_update",
]
