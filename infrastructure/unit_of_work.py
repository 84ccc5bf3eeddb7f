"""SQLAlchemy Unit of Work"""
from __future__ import annotations

from typing import Optional, Callable
import inspect

from sqlalchemy.ext.asyncio import AsyncSession

from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.database import AsyncSessionLocal
from infrastructure.repositories.contest_repository import SQLAlchemyContestRepository
from infrastructure.repositories.participation_repository import SQLAlchemyParticipationRepository
from infrastructure.repositories.payment_repository import SQLAlchemyPaymentRepository
from infrastructure.repositories.user_repository import SQLAlchemyUserRepository


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """Unit of Work over one AsyncSession and one transaction"""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
        session: Optional[AsyncSession] = None,
        *,
        readonly: bool = False,
    ) -> None:
        super().__init__(readonly=readonly)
        self._session_factory = session_factory
        self._external_session = session
        self.session: Optional[AsyncSession] = session

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        if self.session is None:
            self.session = self._session_factory()
        self.user_repository = SQLAlchemyUserRepository(self.session)
        self.contest_repository = SQLAlchemyContestRepository(self.session)
        self.payment_repository = SQLAlchemyPaymentRepository(self.session)
        self.participation_repository = SQLAlchemyParticipationRepository(self.session)
        # explicit transaction only for writers
        if not self._readonly:
            self._transaction = await self.session.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            # commit/rollback normally ends the transaction; close it if it is still active
            tx = getattr(self, "_transaction", None)
            if tx is not None and getattr(tx, "is_active", False):
                close = getattr(tx, "close", None)
                if callable(close):
                    res = close()
                    if inspect.isawaitable(res):
                        await res
            if self._external_session is None and self.session is not None:
                await self.session.close()
                self.session = None
            self.user_repository = None
            self.contest_repository = None
            self.payment_repository = None
            self.participation_repository = None

    async def commit(self) -> None:
        if self._readonly:
            self._committed = True
            return
        if self.session and self.session.in_transaction():
            await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self.session and self.session.in_transaction():
            await self.session.rollback()
        self._committed = False
