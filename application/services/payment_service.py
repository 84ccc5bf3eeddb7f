"""
Payment coordinator use-cases.

Depends only on the PaymentGateway port and the Unit of Work; the gateway
adapter is injected from the composition root (API/tasks). Gateway calls
never run inside an open transaction.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, List, Optional

from application.dtos.payments import (
    ConfirmPaymentRequest,
    CreateIntentRequest,
    CreateIntentResponse,
    PaymentDTO,
    WebhookAck,
)
from application.ports.payment_gateway import PaymentGateway
from core.config import settings
from core.logging_config import get_logger
from domain.common.exceptions import (
    ContestNotFoundException,
    DomainValidationException,
    PaymentNotCompletedException,
    PaymentNotFoundException,
)
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.payment.entity import Payment
from domain.payment.service import PaymentDomainService
from domain.user.entity import Identity
from shared.codes.payment_codes import EVENT_INTENT_SUCCEEDED


logger = get_logger(__name__)

GATEWAY_SUCCEEDED = "succeeded"


class PaymentApplicationService:
    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        gateway: PaymentGateway,
        *,
        update_fee: Optional[Decimal] = None,
        currency: Optional[str] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self.gateway = gateway
        self._update_fee = update_fee if update_fee is not None else settings.contest.update_fee
        self._currency = currency or settings.contest.currency

    async def create_intent(self, identity: Identity, req: CreateIntentRequest) -> CreateIntentResponse:
        if req.price is None or req.price <= 0:
            raise DomainValidationException("Valid price is required", field="price")

        async with self._uow_factory(readonly=True) as uow:
            contest = await uow.contest_repository.get_by_id(req.contest_id)
            if contest is None:
                raise ContestNotFoundException(req.contest_id)
            price = PaymentDomainService.validate_price(
                req.price, contest, req.payment_type, self._update_fee
            )
            await PaymentDomainService(uow.payment_repository).ensure_not_already_paid(
                identity.user_id, contest.id, req.payment_type
            )

        idempotency_key = str(uuid.uuid4())
        logger.info(
            "payment_intent_request",
            user_id=identity.user_id,
            contest_id=req.contest_id,
            payment_type=req.payment_type.value,
            provider=self.gateway.provider,
            idempotency_key=idempotency_key,
        )
        # a failure here propagates before anything is persisted
        intent = await self.gateway.create_intent(
            amount=price,
            currency=self._currency,
            metadata={
                "user_id": str(identity.user_id),
                "contest_id": str(req.contest_id),
                "payment_type": req.payment_type.value,
            },
            idempotency_key=idempotency_key,
        )

        async with self._uow_factory() as uow:
            payment = await PaymentDomainService(uow.payment_repository).record_intent(
                user_id=identity.user_id,
                contest_id=req.contest_id,
                amount=price,
                payment_type=req.payment_type,
                gateway_intent_ref=intent.intent_id,
                currency=self._currency,
            )

        logger.info(
            "payment_intent_created",
            payment_id=payment.id,
            contest_id=payment.contest_id,
            intent_id=intent.intent_id,
        )
        return CreateIntentResponse(client_secret=intent.client_secret, payment_id=payment.id)

    async def confirm(self, identity: Identity, req: ConfirmPaymentRequest) -> PaymentDTO:
        """
        Reconcile a payment against the gateway.

        The client's claim is never trusted: the gateway's intent status
        decides between completed and failed. A completed payment is
        returned as is.
        """
        async with self._uow_factory(readonly=True) as uow:
            payment = await uow.payment_repository.get_by_id(req.payment_id)
        if payment is None:
            raise PaymentNotFoundException(req.payment_id)
        identity.require_owner(payment.user_id, "You can only confirm your own payments")

        if payment.is_completed:
            return self._to_dto(payment)
        if payment.is_failed:
            raise PaymentNotCompletedException(payment.id, payment.status.value)

        intent = await self.gateway.retrieve_intent(payment.gateway_intent_ref)

        async with self._uow_factory() as uow:
            domain = PaymentDomainService(uow.payment_repository)
            if intent.status == GATEWAY_SUCCEEDED:
                await domain.complete(
                    payment,
                    transaction_ref=req.transaction_id or intent.intent_id,
                    source="confirm",
                )
            else:
                await domain.fail(payment, source="confirm", reason=intent.raw_status or intent.status)
            current = await uow.payment_repository.get_by_id(payment.id)
            events = domain.clear_events()

        self._log_events(events)
        if current is None or not current.is_completed:
            raise PaymentNotCompletedException(
                payment.id, current.status.value if current else payment.status.value
            )
        return self._to_dto(current)

    async def handle_webhook(self, headers: dict[str, Any], body: bytes) -> WebhookAck:
        event = self.gateway.parse_webhook(headers, body)
        logger.info(
            "payment_webhook_parsed",
            provider=self.gateway.provider,
            event_type=event.type,
            event_id=event.id,
        )
        # payment_failed is not applied: the intent may still succeed on retry
        if event.type != EVENT_INTENT_SUCCEEDED:
            return WebhookAck()

        intent_id = event.intent_id
        if not intent_id:
            logger.warning("payment_webhook_missing_intent", event_id=event.id)
            return WebhookAck()

        async with self._uow_factory() as uow:
            payment = await uow.payment_repository.get_by_intent_ref(intent_id)
            if payment is None:
                logger.info("payment_webhook_unknown_intent", event_id=event.id, intent_id=intent_id)
                return WebhookAck()
            domain = PaymentDomainService(uow.payment_repository)
            await domain.complete(payment, transaction_ref=intent_id, source="webhook")
            events = domain.clear_events()

        if not events:
            logger.info("payment_webhook_replay_ignored", event_id=event.id, payment_id=payment.id)
        self._log_events(events)
        return WebhookAck()

    async def list_my_payments(self, identity: Identity) -> List[PaymentDTO]:
        async with self._uow_factory(readonly=True) as uow:
            payments = await uow.payment_repository.list_by_user(identity.user_id)
        return [self._to_dto(p) for p in PaymentDomainService.one_per_contest(payments)]

    async def reconcile_pending(
        self,
        older_than: timedelta,
        limit: int = 100,
        max_age: Optional[timedelta] = None,
    ) -> int:
        """
        Complete stale pending payments the gateway reports as succeeded.

        Covers a lost webhook together with a failed client confirm. Never
        marks anything failed, so abandoned checkouts stay pending; the scan
        pages through the whole window by id instead of re-reading the same
        oldest ``limit`` rows on every run. Returns the number of completed
        payments.
        """
        now = datetime.now(timezone.utc)
        cutoff = now - older_than
        not_before = now - max_age if max_age is not None else None

        completed = 0
        scanned = 0
        after_id: Optional[int] = None
        while True:
            async with self._uow_factory(readonly=True) as uow:
                page = await uow.payment_repository.list_pending_before(
                    cutoff, limit, after_id=after_id, not_before=not_before
                )
            if not page:
                break
            scanned += len(page)
            after_id = page[-1].id
            for payment in page:
                if await self._reconcile_one(payment):
                    completed += 1
            if len(page) < limit:
                break

        logger.info("payment_reconcile_finished", scanned=scanned, completed=completed)
        return completed

    async def _reconcile_one(self, payment: Payment) -> bool:
        try:
            intent = await self.gateway.retrieve_intent(payment.gateway_intent_ref)
        except Exception as exc:
            # keep going; the next run retries this payment
            logger.warning(
                "payment_reconcile_lookup_failed",
                payment_id=payment.id,
                intent_id=payment.gateway_intent_ref,
                error=str(exc),
            )
            return False
        if intent.status != GATEWAY_SUCCEEDED:
            return False
        async with self._uow_factory() as uow:
            domain = PaymentDomainService(uow.payment_repository)
            done = await domain.complete(payment, transaction_ref=intent.intent_id, source="reconcile")
            events = domain.clear_events()
        self._log_events(events)
        return done

    async def aclose(self) -> None:
        close = getattr(self.gateway, "aclose", None)
        if callable(close):
            await close()

    @staticmethod
    def _log_events(events: list) -> None:
        for evt in events:
            logger.info(
                "payment_" + type(evt).__name__.lower().replace("payment", "", 1),
                payment_id=evt.payment_id,
                contest_id=evt.contest_id,
                user_id=evt.user_id,
                source=evt.source,
                event_id=evt.event_id,
            )

    @staticmethod
    def _to_dto(payment: Payment) -> PaymentDTO:
        return PaymentDTO.model_validate(payment)
