"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Protocol, runtime_checkable

from application.dtos.payments import PaymentIntent, WebhookEvent


@runtime_checkable
class PaymentGateway(Protocol):
    """Gateway protocol for the third-party payment processor.

    Every call must be bounded by a timeout; failures surface as
    ``PaymentProviderError`` (or its recoverable subclass), a bad webhook
    signature as ``PaymentSignatureError``.
    """

    provider: str

    async def create_intent(
        self,
        amount: Decimal,
        currency: str,
        metadata: dict[str, Any],
        idempotency_key: Optional[str] = None,
    ) -> PaymentIntent: ...

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent: ...

    def parse_webhook(self, headers: dict[str, Any], body: bytes) -> WebhookEvent: ...
