"""
Billing Webhook Endpoints.

Receives subscription-commerce events from the billing provider and turns them
into credit-ledger updates.
"""

import hmac
import logging
from functools import lru_cache, partial
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from api.models import parse_webhook_body
from config import ConfigurationError, Settings, get_settings
from domain.catalog import Catalog, load_catalog
from repositories.ledger_repository import commit_ledger_update
from services.webhook_service import LedgerCommitter, process_billing_event

router = APIRouter()
logger = logging.getLogger(__name__)


def get_webhook_settings() -> Optional[Settings]:
    """Settings for this process, or None when the configuration is incomplete."""
    try:
        return get_settings()
    except ConfigurationError:
        logger.exception("Webhook configuration is incomplete")
        return None


@lru_cache(maxsize=4)
def _catalog_for(path: Optional[str]) -> Catalog:
    return load_catalog(path)


def get_catalog(settings: Optional[Settings] = Depends(get_webhook_settings)) -> Catalog:
    return _catalog_for(settings.catalog_path if settings else None)


def get_ledger_committer(settings: Optional[Settings] = Depends(get_webhook_settings)) -> LedgerCommitter:
    if settings is None:
        return commit_ledger_update
    return partial(
        commit_ledger_update,
        rpc_name=settings.ledger_rpc,
        include_upgrade_flag=settings.send_upgrade_flag,
    )


def _is_authorized(authorization: Optional[str], expected_token: str) -> bool:
    if authorization is None:
        return False
    return hmac.compare_digest(authorization.encode("utf-8"), expected_token.encode("utf-8"))


@router.post(
    "/webhooks/revenuecat",
    response_class=PlainTextResponse,
    summary="Receive Billing Webhook",
    description="Translate a purchase, renewal or plan-change event into a credit-ledger update."
)
async def receive_billing_webhook(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    settings: Optional[Settings] = Depends(get_webhook_settings),
    catalog: Catalog = Depends(get_catalog),
    commit: LedgerCommitter = Depends(get_ledger_committer),
):
    """
    Process one billing webhook.

    **Authentication:**
    The `Authorization` header must exactly match the configured shared secret.
    It is checked before the body is read.

    **Outcomes:**
    - `200 OK`: event processed, or legitimately ignored (cancellation, expiration, unknown type)
    - `401`: missing or mismatched `Authorization` header
    - `500`: server misconfigured, malformed body, invalid user id or ledger failure

    Failures are not retried here; the provider redelivers and the ledger
    function is idempotent on the transaction id.

    **Example request:**
    ```json
    {
      "event": {
        "type": "INITIAL_PURCHASE",
        "id": "CDD0F9C1-8D33-4B5C-9F3C-1E2B1E6A7F10",
        "app_user_id": "123e4567-e89b-42d3-a456-426614174000",
        "product_id": "subscribe.photos_ai_studio.1week_pro",
        "price_in_purchased_currency": 17.99,
        "expiration_at_ms": 1736380800000,
        "event_timestamp_ms": 1735776000000,
        "environment": "PRODUCTION"
      }
    }
    ```
    """
    if settings is None or not settings.webhook_auth_token:
        raise HTTPException(status_code=500, detail="Server configuration error")

    if not _is_authorized(authorization, settings.webhook_auth_token):
        logger.warning("Rejected webhook: invalid authorization token")
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        event = parse_webhook_body(await request.body())
        logger.info(
            f"Webhook event received: {event.raw_type} {event.transaction_id}",
            extra={
                "event_type": event.raw_type,
                "transaction_id": event.transaction_id,
                "environment": event.environment.value,
            },
        )

        result = await run_in_threadpool(
            process_billing_event,
            event,
            commit=commit,
            catalog=catalog,
        )

    except Exception:
        logger.exception("Error processing webhook")
        raise HTTPException(status_code=500, detail="Internal Server Error")

    if not result.committed:
        logger.info(f"Webhook event {event.transaction_id} produced no ledger change")

    return "OK"
