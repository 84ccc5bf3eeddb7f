"""Seed helpers writing straight through the repositories."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from domain.contest.entity import Contest, ContestStatus
from domain.payment.entity import Payment, PaymentStatus, PaymentType
from domain.user.entity import Identity, Role, User


def future(days: int = 7) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


def past(days: int = 1) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


def identity_of(user: User) -> Identity:
    return Identity(user_id=user.id, role=user.role, email=user.email)


async def make_user(uow_factory, name: str = "Alice", *, role: Role = Role.USER, email: Optional[str] = None) -> User:
    async with uow_factory() as uow:
        return await uow.user_repository.create(User(
            id=None,
            name=name,
            email=email or f"{name.lower()}@example.com",
            role=role,
        ))


async def make_contest(
    uow_factory,
    creator: User,
    *,
    price: Decimal = Decimal("25"),
    participation_limit: int = 0,
    status: ContestStatus = ContestStatus.CONFIRMED,
    deadline: Optional[datetime] = None,
    name: str = "Logo Design",
) -> Contest:
    now = datetime.now(timezone.utc)
    async with uow_factory() as uow:
        return await uow.contest_repository.create(Contest(
            id=None,
            name=name,
            price=price,
            prize_money=Decimal("100"),
            deadline=deadline or future(),
            creator_id=creator.id,
            creator_name=creator.name,
            status=status,
            participation_limit=participation_limit,
            created_at=now,
            updated_at=now,
        ))


async def make_payment(
    uow_factory,
    user: User,
    contest: Contest,
    *,
    status: PaymentStatus = PaymentStatus.COMPLETED,
    payment_type: PaymentType = PaymentType.ENTRY,
    intent_ref: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Payment:
    now = datetime.now(timezone.utc)
    async with uow_factory() as uow:
        return await uow.payment_repository.create(Payment(
            id=None,
            user_id=user.id,
            contest_id=contest.id,
            amount=contest.price,
            gateway_intent_ref=intent_ref or f"pi_seed_{user.id}_{contest.id}_{status.value}",
            payment_type=payment_type,
            status=status,
            transaction_ref="tx_seed" if status == PaymentStatus.COMPLETED else None,
            paid_at=now if status == PaymentStatus.COMPLETED else None,
            created_at=created_at or now,
            updated_at=created_at or now,
        ))
