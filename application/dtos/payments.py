"""
Payment DTOs (Pydantic v2) used at application boundaries.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from domain.payment.entity import PaymentStatus, PaymentType

from .base import CamelModel, Money


# --- gateway side ---------------------------------------------------------

class PaymentIntent(BaseModel):
    intent_id: str
    status: str  # internal vocabulary: pending / succeeded / failed
    client_secret: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    provider: str
    raw_status: Optional[str] = None


class WebhookEvent(BaseModel):
    id: str
    type: str
    provider: str
    data: dict[str, Any]
    raw_headers: Optional[dict[str, Any]] = None
    raw_body: Optional[bytes] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def intent_id(self) -> Optional[str]:
        obj = self.data.get("object") if isinstance(self.data, dict) else None
        if isinstance(obj, dict):
            return obj.get("id")
        return None


# --- client side ----------------------------------------------------------

class CreateIntentRequest(CamelModel):
    contest_id: int
    # checked by the coordinator so a missing price is a business validation error
    price: Optional[Decimal] = None
    payment_type: PaymentType = PaymentType.ENTRY


class CreateIntentResponse(CamelModel):
    client_secret: Optional[str] = None
    payment_id: int


class ConfirmPaymentRequest(CamelModel):
    payment_id: int
    transaction_id: Optional[str] = Field(default=None, max_length=255)


class PaymentDTO(CamelModel):
    id: int
    user_id: int
    contest_id: int
    amount: Money
    currency: str
    payment_type: PaymentType
    status: PaymentStatus
    gateway_intent_ref: str
    transaction_ref: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ConfirmPaymentResponse(CamelModel):
    payment: PaymentDTO


class WebhookAck(CamelModel):
    received: bool = True
