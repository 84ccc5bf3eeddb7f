"""Abstract Unit of Work"""
from __future__ import annotations

from abc import ABC, abstractmethod

from domain.contest.repository import ContestRepository
from domain.participation.repository import ParticipationRepository
from domain.payment.repository import PaymentRepository
from domain.user.repository import UserRepository


class AbstractUnitOfWork(ABC):
    """Transaction boundary used by the application services"""

    user_repository: UserRepository
    contest_repository: ContestRepository
    payment_repository: PaymentRepository
    participation_repository: ParticipationRepository

    def __init__(self, *, readonly: bool = False) -> None:
        self._committed = False
        self._readonly = readonly
        self.user_repository = None  # type: ignore[assignment]
        self.contest_repository = None  # type: ignore[assignment]
        self.payment_repository = None  # type: ignore[assignment]
        self.participation_repository = None  # type: ignore[assignment]

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            await self.rollback()
        else:
            # auto-commit only when writable and not committed explicitly
            if not self._readonly and not self._committed:
                await self.commit()

    @abstractmethod
    async def commit(self) -> None:
        """Commit the transaction"""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Roll the transaction back"""
