"""
Replay a stored billing webhook payload.

Resolves the event exactly as the webhook endpoint would and prints the
decision trace and ledger intent. Nothing is written unless --commit is given,
in which case the intent is sent to the ledger RPC (idempotent per transaction).

Usage:
    python scripts/replay_event.py payload.json
    python scripts/replay_event.py payload.json --catalog catalog.json
    python scripts/replay_event.py payload.json --commit
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path so we can import from domain, services, etc.
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.models import MalformedEventError, parse_webhook_body
from config import ConfigurationError
from domain.catalog import load_catalog
from domain.ledger import InvalidUserIdError
from repositories.ledger_repository import LedgerUpdateError, commit_ledger_update
from services.entitlement_resolver import DecisionTrace
from services.webhook_service import process_billing_event


def _print_trace(trace: DecisionTrace) -> None:
    print(f"Decision: {trace.branch.value}")
    print(f"  Transaction: {trace.transaction_id}")
    print(f"  Event type:  {trace.event_type}")
    print(f"  Product:     {trace.product_id}")
    if trace.direction is not None:
        print(f"  Direction:   {trace.direction.value}")
    if trace.base_credits is not None:
        print(f"  Base credits: {trace.base_credits}  (paid {trace.price_paid})")
    if trace.reason:
        print(f"  Reason:      {trace.reason}")


def _skip_commit(intent) -> None:
    print("[DRY RUN] Ledger not updated (pass --commit to apply)")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Replay a billing webhook payload")
    parser.add_argument("payload", help="Path to a JSON webhook body ({\"event\": {...}})")
    parser.add_argument("--catalog", help="JSON catalog file (default: built-in catalog)")
    parser.add_argument("--commit", action="store_true", help="Send the intent to the ledger RPC")
    args = parser.parse_args(argv)

    try:
        event = parse_webhook_body(Path(args.payload).read_bytes())
    except (OSError, MalformedEventError) as e:
        print(f"[ERROR] Cannot read payload: {e}")
        return 1

    catalog = load_catalog(args.catalog)

    if args.commit:
        commit = commit_ledger_update
    else:
        commit = _skip_commit

    try:
        result = process_billing_event(event, commit=commit, catalog=catalog, observer=_print_trace)
    except (InvalidUserIdError, LedgerUpdateError, ConfigurationError) as e:
        print(f"[ERROR] {e}")
        return 1

    if result.intent is None:
        print("No ledger change for this event.")
        return 0

    intent = result.intent
    print("Ledger intent:")
    print(f"  User:        {intent.user_id}")
    print(f"  Credits:     {intent.credit_delta}")
    print(f"  Models:      {intent.model_slot_delta}")
    print(f"  Product:     {intent.product_id}")
    print(f"  Expires:     {intent.expiration_date.isoformat()}")
    print(f"  Consumable:  {intent.is_consumable}")
    print(f"  Renewal:     {intent.is_renewal}")
    print(f"  Upgrade:     {intent.is_upgrade}")
    if args.commit:
        print("[SUCCESS] Ledger updated")
    return 0


if __name__ == "__main__":
    sys.exit(main())
