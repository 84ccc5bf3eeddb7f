"""
Contest aggregate
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from domain.common.exceptions import (
    ContestFullException,
    ContestNotConfirmedException,
    DeadlineNotPassedException,
    DeadlinePassedException,
    DomainValidationException,
    WinnerAlreadyDeclaredException,
)
from domain.common.time_utils import ensure_utc


class ContestStatus(str, Enum):
    PENDING = "pending"        # awaiting admin approval
    CONFIRMED = "confirmed"    # open for entries


# Fields a creator may change through update_contest
EDITABLE_FIELDS = (
    "name",
    "description",
    "task_instructions",
    "contest_type",
    "price",
    "prize_money",
    "deadline",
    "participation_limit",
)


@dataclass
class Contest:
    """
    Contest aggregate root

    Rules:
    1. price, prize_money and participation_limit are non-negative
       (participation_limit == 0 means unlimited)
    2. participants_count never exceeds a non-zero participation_limit
    3. winner_user_id is set at most once, only after the deadline
    4. editing a confirmed contest sends it back to admin review
    """

    id: Optional[int]
    name: str
    price: Decimal
    prize_money: Decimal
    deadline: datetime
    creator_id: int
    description: str = ""
    task_instructions: str = ""
    contest_type: str = ""
    creator_name: str = ""
    status: ContestStatus = ContestStatus.PENDING
    participation_limit: int = 0
    participants_count: int = 0
    winner_user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.status, ContestStatus):
            self.status = ContestStatus(self.status)
        self.price = Decimal(str(self.price))
        self.prize_money = Decimal(str(self.prize_money))
        self._validate()
        self.deadline = ensure_utc(self.deadline)
        self.created_at = ensure_utc(self.created_at)
        self.updated_at = ensure_utc(self.updated_at)

    def _validate(self) -> None:
        if not self.name or not self.name.strip():
            raise DomainValidationException("Contest name is required", field="name")
        if self.price < 0:
            raise DomainValidationException(f"Price must be >= 0: {self.price}", field="price")
        if self.prize_money < 0:
            raise DomainValidationException(f"Prize money must be >= 0: {self.prize_money}", field="prize_money")
        if self.participation_limit < 0:
            raise DomainValidationException(
                f"Participation limit must be >= 0: {self.participation_limit}",
                field="participation_limit",
            )

    @property
    def is_confirmed(self) -> bool:
        return self.status == ContestStatus.CONFIRMED

    def has_capacity(self) -> bool:
        return self.participation_limit == 0 or self.participants_count < self.participation_limit

    def deadline_passed(self, now: datetime) -> bool:
        return now > self.deadline

    def ensure_open_for_admission(self, now: datetime) -> None:
        """Status, capacity, then deadline; the same order the admission flow reports them."""
        if not self.is_confirmed:
            raise ContestNotConfirmedException(self.id)
        if not self.has_capacity():
            raise ContestFullException(self.id, self.participation_limit)
        if self.deadline_passed(now):
            raise DeadlinePassedException(self.id)

    def ensure_winner_declarable(self, now: datetime) -> None:
        if now < self.deadline:
            raise DeadlineNotPassedException(self.id)
        if self.winner_user_id is not None:
            raise WinnerAlreadyDeclaredException(self.id)

    def apply_update(self, changes: dict) -> None:
        """Apply creator edits; a confirmed contest goes back to pending."""
        for key, value in changes.items():
            if key not in EDITABLE_FIELDS or value is None:
                continue
            setattr(self, key, value)
        self.price = Decimal(str(self.price))
        self.prize_money = Decimal(str(self.prize_money))
        self.deadline = ensure_utc(self.deadline)
        self._validate()
        if self.participation_limit and self.participation_limit < self.participants_count:
            raise DomainValidationException(
                f"Participation limit {self.participation_limit} is below the "
                f"{self.participants_count} participants already admitted",
                field="participation_limit",
            )
        if self.status == ContestStatus.CONFIRMED:
            self.status = ContestStatus.PENDING
        self.updated_at = datetime.now(timezone.utc)

    def set_status(self, status: ContestStatus) -> None:
        self.status = ContestStatus(status)
        self.updated_at = datetime.now(timezone.utc)
