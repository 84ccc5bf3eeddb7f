"""
Payment repository - SQLAlchemy implementation
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging_config import get_logger
from domain.common.exceptions import ConflictException
from domain.payment.entity import Payment, PaymentStatus, PaymentType
from domain.payment.repository import PaymentRepository
from infrastructure.models.payment import PaymentModel
from shared.codes import BusinessCode


logger = get_logger(__name__)


class DuplicateIntentException(ConflictException):
    def __init__(self, gateway_intent_ref: str):
        super().__init__(
            BusinessCode.BUSINESS_ERROR,
            "Payment intent already recorded",
            "DuplicatePaymentIntent",
            {"gateway_intent_ref": gateway_intent_ref},
        )


class SQLAlchemyPaymentRepository(PaymentRepository):
    """SQLAlchemy implementation of PaymentRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: PaymentModel) -> Payment:
        return Payment(
            id=model.id,
            user_id=model.user_id,
            contest_id=model.contest_id,
            amount=Decimal(str(model.amount)),
            currency=model.currency,
            payment_type=PaymentType(model.payment_type),
            status=PaymentStatus(model.status),
            gateway_intent_ref=model.gateway_intent_ref,
            transaction_ref=model.transaction_ref,
            paid_at=model.paid_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Payment) -> PaymentModel:
        return PaymentModel(
            id=entity.id,
            user_id=entity.user_id,
            contest_id=entity.contest_id,
            amount=entity.amount,
            currency=entity.currency,
            payment_type=entity.payment_type.value,
            status=entity.status.value,
            gateway_intent_ref=entity.gateway_intent_ref,
            transaction_ref=entity.transaction_ref,
            paid_at=entity.paid_at,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def _fetch_one(self, *criteria) -> Optional[Payment]:
        result = await self.session.execute(
            select(PaymentModel).where(*criteria).execution_options(populate_existing=True)
        )
        db_payment = result.scalar_one_or_none()
        return self._to_entity(db_payment) if db_payment else None

    async def create(self, payment: Payment) -> Payment:
        try:
            db_payment = self._to_model(payment)
            self.session.add(db_payment)
            await self.session.flush()
            await self.session.refresh(db_payment)
            logger.info(
                "payment_row_created",
                payment_id=db_payment.id,
                contest_id=db_payment.contest_id,
                payment_type=db_payment.payment_type,
            )
            return self._to_entity(db_payment)
        except IntegrityError:
            await self.session.rollback()
            logger.warning("payment_create_conflict", gateway_intent_ref=payment.gateway_intent_ref)
            raise DuplicateIntentException(payment.gateway_intent_ref)

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        return await self._fetch_one(PaymentModel.id == payment_id)

    async def get_by_intent_ref(self, gateway_intent_ref: str) -> Optional[Payment]:
        return await self._fetch_one(PaymentModel.gateway_intent_ref == gateway_intent_ref)

    async def find_for(
        self,
        user_id: int,
        contest_id: int,
        status: PaymentStatus,
        payment_type: PaymentType = PaymentType.ENTRY,
    ) -> Optional[Payment]:
        result = await self.session.execute(
            select(PaymentModel)
            .where(
                PaymentModel.user_id == user_id,
                PaymentModel.contest_id == contest_id,
                PaymentModel.status == status.value,
                PaymentModel.payment_type == payment_type.value,
            )
            .order_by(PaymentModel.created_at.desc(), PaymentModel.id.desc())
            .limit(1)
        )
        db_payment = result.scalars().first()
        return self._to_entity(db_payment) if db_payment else None

    async def attach_intent(self, payment: Payment) -> Payment:
        try:
            result = await self.session.execute(
                update(PaymentModel)
                .where(
                    PaymentModel.id == payment.id,
                    PaymentModel.status == PaymentStatus.PENDING.value,
                )
                .values(
                    gateway_intent_ref=payment.gateway_intent_ref,
                    amount=payment.amount,
                    transaction_ref=None,
                    updated_at=payment.updated_at,
                )
                .execution_options(synchronize_session=False)
            )
        except IntegrityError:
            await self.session.rollback()
            logger.warning("payment_attach_conflict", gateway_intent_ref=payment.gateway_intent_ref)
            raise DuplicateIntentException(payment.gateway_intent_ref)

        if result.rowcount == 1:
            logger.info("payment_intent_reattached", payment_id=payment.id)
            return await self.get_by_id(payment.id)

        # the row left pending meanwhile; record the new intent on a fresh row
        payment.id = None
        payment.created_at = payment.updated_at
        return await self.create(payment)

    async def complete_if_pending(
        self,
        payment_id: int,
        *,
        transaction_ref: Optional[str],
        paid_at: datetime,
    ) -> bool:
        result = await self.session.execute(
            update(PaymentModel)
            .where(
                PaymentModel.id == payment_id,
                PaymentModel.status == PaymentStatus.PENDING.value,
            )
            .values(
                status=PaymentStatus.COMPLETED.value,
                transaction_ref=transaction_ref,
                paid_at=paid_at,
                updated_at=paid_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def fail_if_pending(self, payment_id: int) -> bool:
        result = await self.session.execute(
            update(PaymentModel)
            .where(
                PaymentModel.id == payment_id,
                PaymentModel.status == PaymentStatus.PENDING.value,
            )
            .values(status=PaymentStatus.FAILED.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_by_user(self, user_id: int) -> List[Payment]:
        result = await self.session.execute(
            select(PaymentModel)
            .where(PaymentModel.user_id == user_id)
            .order_by(PaymentModel.created_at.desc(), PaymentModel.id.desc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def exists_for_contest(self, contest_id: int) -> bool:
        result = await self.session.execute(
            select(PaymentModel.id).where(PaymentModel.contest_id == contest_id).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def list_pending_before(
        self,
        cutoff: datetime,
        limit: int = 100,
        *,
        after_id: Optional[int] = None,
        not_before: Optional[datetime] = None,
    ) -> List[Payment]:
        stmt = select(PaymentModel).where(
            PaymentModel.status == PaymentStatus.PENDING.value,
            PaymentModel.created_at < cutoff,
        )
        if after_id is not None:
            stmt = stmt.where(PaymentModel.id > after_id)
        if not_before is not None:
            stmt = stmt.where(PaymentModel.created_at >= not_before)
        result = await self.session.execute(stmt.order_by(PaymentModel.id.asc()).limit(limit))
        return [self._to_entity(m) for m in result.scalars().all()]
