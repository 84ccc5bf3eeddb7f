"""
Stripe PaymentIntents adapter using the official stripe-python SDK.

The SDK is synchronous: every call runs in a worker thread under the
configured total timeout, and recoverable failures (rate limits, network)
are retried by tenacity with the same idempotency key. Webhook signatures
are verified with ``stripe.Webhook.construct_event`` over the raw body.
"""
from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Optional

import stripe

from application.dtos.payments import PaymentIntent, WebhookEvent
from core.logging_config import get_logger
from core.settings import payment_settings
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.exceptions import (
    PaymentProviderError,
    PaymentRecoverableError,
    PaymentSignatureError,
)


logger = get_logger(__name__)

# Currencies without minor units
ZERO_DECIMAL_CURRENCIES = {"JPY", "KRW", "VND", "CLP"}


class StripeClient(BasePaymentClient):
    provider = "stripe"

    def __init__(self):
        super().__init__(
            timeouts=payment_settings.timeouts.model_dump(),
            retry={"max": payment_settings.retry.max, "base": payment_settings.retry.base_backoff},
        )
        if not payment_settings.stripe.secret_key:
            raise RuntimeError("STRIPE__SECRET_KEY not configured")
        stripe.api_key = payment_settings.stripe.secret_key
        # retries are owned by tenacity
        stripe.max_network_retries = 0

    @staticmethod
    def _to_minor(amount: Decimal, currency: str) -> int:
        # Stripe expects amounts in the smallest currency unit
        exponent = 0 if currency.upper() in ZERO_DECIMAL_CURRENCIES else 2
        return int((Decimal(str(amount)) * (Decimal(10) ** exponent)).to_integral_value())

    @staticmethod
    def _from_minor(amount: Optional[int], currency: str) -> Optional[Decimal]:
        if amount is None:
            return None
        exponent = 0 if currency.upper() in ZERO_DECIMAL_CURRENCIES else 2
        return Decimal(amount) / (Decimal(10) ** exponent)

    def _translate(self, exc: Exception) -> Exception:
        if isinstance(exc, (PaymentProviderError, PaymentRecoverableError)):
            return exc
        code = getattr(exc, "code", None)
        if isinstance(exc, (stripe.RateLimitError, stripe.APIConnectionError)):
            return PaymentRecoverableError(str(exc), provider=self.provider, provider_code=code)
        return PaymentProviderError(str(exc), provider=self.provider, provider_code=code)

    def _to_intent(self, pi: Any) -> PaymentIntent:
        currency = str(pi.get("currency") or "usd")
        raw_status = str(pi["status"])
        return PaymentIntent(
            intent_id=str(pi["id"]),
            status=self._map_status(raw_status),
            raw_status=raw_status,
            client_secret=pi.get("client_secret"),
            amount=self._from_minor(pi.get("amount"), currency),
            currency=currency,
            provider=self.provider,
        )

    async def create_intent(
        self,
        amount: Decimal,
        currency: str,
        metadata: dict[str, Any],
        idempotency_key: Optional[str] = None,
    ) -> PaymentIntent:
        async def _create() -> PaymentIntent:
            try:
                pi = await self._bounded(
                    stripe.PaymentIntent.create,
                    amount=self._to_minor(amount, currency),
                    currency=currency.lower(),
                    metadata=metadata,
                    automatic_payment_methods={"enabled": True},
                    idempotency_key=idempotency_key,
                )
            except Exception as exc:
                raise self._translate(exc) from exc
            return self._to_intent(pi)

        intent = await self._retry(_create)
        self._log("stripe_intent_created", intent_id=intent.intent_id, status=intent.status)
        return intent

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        async def _retrieve() -> PaymentIntent:
            try:
                pi = await self._bounded(stripe.PaymentIntent.retrieve, intent_id)
            except Exception as exc:
                raise self._translate(exc) from exc
            return self._to_intent(pi)

        intent = await self._retry(_retrieve)
        self._log("stripe_intent_retrieved", intent_id=intent.intent_id, status=intent.status)
        return intent

    def parse_webhook(self, headers: dict[str, Any], body: bytes) -> WebhookEvent:
        secret = payment_settings.stripe.webhook_secret
        if not secret:
            raise PaymentSignatureError("Missing STRIPE__WEBHOOK_SECRET", provider=self.provider)
        header_name = payment_settings.webhook.signature_header.lower()
        sig = next((v for k, v in headers.items() if k.lower() == header_name), None)
        if not sig:
            raise PaymentSignatureError("Missing Stripe-Signature header", provider=self.provider)
        try:
            stripe.Webhook.construct_event(
                payload=body,
                sig_header=sig,
                secret=secret,
                tolerance=payment_settings.webhook.tolerance_seconds,
            )
            payload = json.loads(body)
        except (stripe.SignatureVerificationError, ValueError) as exc:
            logger.warning("stripe_webhook_rejected", error=str(exc))
            raise PaymentSignatureError(str(exc), provider=self.provider) from exc
        return WebhookEvent(
            id=str(payload.get("id")),
            type=str(payload.get("type")),
            provider=self.provider,
            data=payload.get("data", {}) or {},
            raw_headers=headers,
            raw_body=body,
        )
