"""
Payment database model - SQLAlchemy ORM
Infrastructure detail only; the business rules live in domain.payment.entity.Payment
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String

from .base import Base


class PaymentModel(Base):
    """
    Payment table mapping
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, comment="Payer")
    contest_id = Column(
        Integer,
        ForeignKey("contests.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Contest paid for",
    )

    amount = Column(Numeric(precision=15, scale=2), nullable=False, comment="Amount")
    currency = Column(String(3), nullable=False, default="usd", comment="ISO-4217 code")
    payment_type = Column(String(20), nullable=False, default="entry", comment="entry/update")

    status = Column(
        String(20),
        nullable=False,
        default="pending",
        index=True,
        comment="pending/completed/failed"
    )

    # one row per gateway intent; webhooks look payments up by this
    gateway_intent_ref = Column(String(255), unique=True, nullable=False, comment="Gateway intent id")
    transaction_ref = Column(String(255), nullable=True, comment="Gateway transaction id")

    paid_at = Column(DateTime(timezone=True), nullable=True, comment="Completed at")
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
        comment="Created at"
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="Updated at"
    )

    __table_args__ = (
        Index("ix_payments_user_contest_status", "user_id", "contest_id", "status"),
        Index("ix_payments_status_created", "status", "created_at"),
    )

    def __repr__(self):
        return (
            f"<PaymentModel(id={self.id}, user_id={self.user_id}, contest_id={self.contest_id}, "
            f"amount={self.amount}, status='{self.status}')>"
        )
