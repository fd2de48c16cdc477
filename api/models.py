"""
API Request Models.

Pydantic models validating inbound billing-provider webhooks. Field names follow
the provider's payload; to_billing_event() resolves optional fields into the
domain BillingEvent so downstream logic never checks for presence itself.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from domain.billing_event import BillingEvent, BillingEventType, Environment
from domain.time import MAX_EPOCH_MILLIS


# ============================================================================
# Webhook Models
# ============================================================================

class WebhookEventPayload(BaseModel):
    """Single billing event as delivered by the provider."""
    type: str = Field(..., min_length=1, description="Provider event type, e.g. INITIAL_PURCHASE")
    id: str = Field(..., min_length=1, description="Provider transaction/event id")
    app_user_id: str = ""
    product_id: str = ""
    new_product_id: Optional[str] = None
    price_in_purchased_currency: Optional[Decimal] = None
    expiration_at_ms: Optional[int] = Field(None, ge=0, le=MAX_EPOCH_MILLIS)
    event_timestamp_ms: int = Field(..., ge=0, le=MAX_EPOCH_MILLIS)
    environment: Optional[Environment] = None

    @field_validator("price_in_purchased_currency", mode="before")
    @classmethod
    def _price_from_json_number(cls, value: Any) -> Any:
        # Floats go through str() so 17.99 is not read as 17.989999...
        if isinstance(value, float):
            return str(value)
        return value

    @field_validator("new_product_id", mode="before")
    @classmethod
    def _blank_as_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    def to_billing_event(self) -> BillingEvent:
        """Convert to the domain event, applying provider defaults."""
        expiration = self.expiration_at_ms
        if expiration is None:
            # Non-subscription purchases carry no expiration
            expiration = self.event_timestamp_ms

        return BillingEvent(
            type=BillingEventType.parse(self.type),
            user_id=self.app_user_id,
            transaction_id=self.id,
            product_id=self.product_id,
            new_product_id=self.new_product_id,
            price_paid=self.price_in_purchased_currency or Decimal("0"),
            expiration_epoch_millis=expiration,
            event_epoch_millis=self.event_timestamp_ms,
            environment=self.environment or Environment.PRODUCTION,
            raw_type=self.type,
        )

    class Config:
        json_schema_extra = {
            "example": {
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


class WebhookEnvelope(BaseModel):
    """Webhook body: the provider wraps the event in an envelope."""
    api_version: Optional[str] = None
    event: WebhookEventPayload


# ============================================================================
# Error Models
# ============================================================================

class MalformedEventError(ValueError):
    """Raised when a webhook body is not valid JSON or misses required fields."""
    pass


def parse_webhook_body(body: bytes) -> BillingEvent:
    """
    Validate a raw webhook body and convert it to a BillingEvent.

    Raises:
        MalformedEventError: If the body is not a valid webhook envelope
    """
    try:
        envelope = WebhookEnvelope.model_validate_json(body)
    except ValidationError as e:
        raise MalformedEventError(f"Invalid webhook body: {e.error_count()} validation error(s)") from e

    try:
        return envelope.event.to_billing_event()
    except ValueError as e:
        raise MalformedEventError(f"Invalid webhook event: {e}") from e
