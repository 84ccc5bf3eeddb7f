"""
Payment entity - one attempt to pay for a contest
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from domain.common.exceptions import DomainValidationException
from domain.common.time_utils import ensure_utc


class PaymentStatus(str, Enum):
    """Payment status"""
    PENDING = "pending"        # intent created, waiting for the gateway
    COMPLETED = "completed"    # gateway reported success
    FAILED = "failed"          # terminal, never reused


class PaymentType(str, Enum):
    ENTRY = "entry"      # contest entry fee, funds one participation
    UPDATE = "update"    # flat fee for editing a contest


@dataclass
class Payment:
    """
    Payment aggregate

    Rules:
    1. amount is strictly positive
    2. status moves pending -> completed or pending -> failed, nothing else
    3. paid_at is written once, on the transition to completed
    4. gateway_intent_ref is unique across all payments
    """

    id: Optional[int]
    user_id: int
    contest_id: int
    amount: Decimal
    gateway_intent_ref: str
    payment_type: PaymentType = PaymentType.ENTRY
    status: PaymentStatus = PaymentStatus.PENDING
    currency: str = "usd"
    transaction_ref: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.status, PaymentStatus):
            self.status = PaymentStatus(self.status)
        if not isinstance(self.payment_type, PaymentType):
            self.payment_type = PaymentType(self.payment_type)
        self.amount = Decimal(str(self.amount))
        self._validate_amount()
        self._validate_currency()
        self.paid_at = ensure_utc(self.paid_at)
        self.created_at = ensure_utc(self.created_at)
        self.updated_at = ensure_utc(self.updated_at)

    def _validate_amount(self) -> None:
        if self.amount <= 0:
            raise DomainValidationException(
                f"Payment amount must be greater than 0: {self.amount}",
                field="amount",
            )

    def _validate_currency(self) -> None:
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha():
            raise DomainValidationException(
                f"Invalid currency code: {self.currency}",
                field="currency",
            )

    @property
    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self.status == PaymentStatus.FAILED

    def funds_entry(self, user_id: int, contest_id: int) -> bool:
        """Whether this payment can be exchanged for a participation by the given user."""
        return (
            self.user_id == user_id
            and self.contest_id == contest_id
            and self.is_completed
            and self.payment_type == PaymentType.ENTRY
        )

    def reissue(self, gateway_intent_ref: str, amount: Decimal) -> None:
        """Point a pending row at a fresh gateway intent (client retried create_intent)."""
        if not self.is_pending:
            raise DomainValidationException(
                f"Cannot reissue a payment in status {self.status.value}",
                field="status",
            )
        self.gateway_intent_ref = gateway_intent_ref
        self.amount = Decimal(str(amount))
        self._validate_amount()
        self.transaction_ref = None
        self.updated_at = datetime.now(timezone.utc)

