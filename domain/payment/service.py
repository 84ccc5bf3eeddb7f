"""
Payment domain service - price rules and the pending/completed/failed transitions
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from domain.common.exceptions import (
    DomainValidationException,
    PaymentAlreadyCompletedException,
    PriceMismatchException,
)
from domain.contest.entity import Contest

from .entity import Payment, PaymentStatus, PaymentType
from .events import PaymentCompleted, PaymentFailed
from .repository import PaymentRepository


class PaymentDomainService:
    """
    Payment domain service

    Responsibilities:
    1. price validation (contest entry fee or the flat update fee)
    2. one completed entry payment per (user, contest)
    3. reuse of a pending entry row when the client asks for a new intent
    4. conditional state transitions, recording domain events
    """

    def __init__(self, payment_repository: PaymentRepository):
        self.payment_repository = payment_repository
        self.events: List = []

    @staticmethod
    def validate_price(
        price: Optional[Decimal],
        contest: Contest,
        payment_type: PaymentType,
        update_fee: Decimal,
    ) -> Decimal:
        if price is None or Decimal(str(price)) <= 0:
            raise DomainValidationException("Valid price is required", field="price")
        price = Decimal(str(price))
        expected = update_fee if payment_type == PaymentType.UPDATE else contest.price
        if price != Decimal(str(expected)):
            raise PriceMismatchException(price, expected)
        return price

    async def ensure_not_already_paid(
        self, user_id: int, contest_id: int, payment_type: PaymentType
    ) -> None:
        # update fees may be paid any number of times
        if payment_type != PaymentType.ENTRY:
            return
        completed = await self.payment_repository.find_for(
            user_id, contest_id, PaymentStatus.COMPLETED, PaymentType.ENTRY
        )
        if completed is not None:
            raise PaymentAlreadyCompletedException(user_id, contest_id)

    async def record_intent(
        self,
        *,
        user_id: int,
        contest_id: int,
        amount: Decimal,
        payment_type: PaymentType,
        gateway_intent_ref: str,
        currency: str,
    ) -> Payment:
        """
        Persist the intent the gateway just created.

        A pending entry row for the same (user, contest) is updated in place
        instead of duplicated; failed rows are left alone.
        """
        await self.ensure_not_already_paid(user_id, contest_id, payment_type)

        if payment_type == PaymentType.ENTRY:
            pending = await self.payment_repository.find_for(
                user_id, contest_id, PaymentStatus.PENDING, PaymentType.ENTRY
            )
            if pending is not None:
                pending.reissue(gateway_intent_ref, amount)
                return await self.payment_repository.attach_intent(pending)

        now = datetime.now(timezone.utc)
        payment = Payment(
            id=None,
            user_id=user_id,
            contest_id=contest_id,
            amount=amount,
            gateway_intent_ref=gateway_intent_ref,
            payment_type=payment_type,
            status=PaymentStatus.PENDING,
            currency=currency,
            created_at=now,
            updated_at=now,
        )
        return await self.payment_repository.create(payment)

    async def complete(
        self,
        payment: Payment,
        *,
        transaction_ref: Optional[str],
        source: str,
        now: Optional[datetime] = None,
    ) -> bool:
        moved = await self.payment_repository.complete_if_pending(
            payment.id,
            transaction_ref=transaction_ref,
            paid_at=now or datetime.now(timezone.utc),
        )
        if moved:
            self.events.append(PaymentCompleted(
                payment_id=payment.id,
                user_id=payment.user_id,
                contest_id=payment.contest_id,
                gateway_intent_ref=payment.gateway_intent_ref,
                source=source,
            ))
        return moved

    async def fail(self, payment: Payment, *, source: str, reason: Optional[str] = None) -> bool:
        moved = await self.payment_repository.fail_if_pending(payment.id)
        if moved:
            self.events.append(PaymentFailed(
                payment_id=payment.id,
                user_id=payment.user_id,
                contest_id=payment.contest_id,
                gateway_intent_ref=payment.gateway_intent_ref,
                source=source,
                reason=reason,
            ))
        return moved

    @staticmethod
    def one_per_contest(payments: List[Payment]) -> List[Payment]:
        """Keep one payment per contest: a completed one if any, else the newest."""
        chosen: Dict[int, Payment] = {}
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        for payment in payments:
            current = chosen.get(payment.contest_id)
            if current is None:
                chosen[payment.contest_id] = payment
                continue
            if current.is_completed != payment.is_completed:
                if payment.is_completed:
                    chosen[payment.contest_id] = payment
                continue
            if (payment.created_at or epoch) > (current.created_at or epoch):
                chosen[payment.contest_id] = payment
        return sorted(chosen.values(), key=lambda p: p.created_at or epoch, reverse=True)

    def clear_events(self) -> List:
        """Return and drop the collected events"""
        events = self.events.copy()
        self.events.clear()
        return events
