"""
Payment repository interface
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .entity import Payment, PaymentStatus, PaymentType


class PaymentRepository(ABC):
    """Payment repository: declares what can be done, not how"""

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        """Insert a payment; a duplicate gateway_intent_ref raises a conflict"""
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        pass

    @abstractmethod
    async def get_by_intent_ref(self, gateway_intent_ref: str) -> Optional[Payment]:
        pass

    @abstractmethod
    async def find_for(
        self,
        user_id: int,
        contest_id: int,
        status: PaymentStatus,
        payment_type: PaymentType = PaymentType.ENTRY,
    ) -> Optional[Payment]:
        """Newest payment of the user for the contest in the given status and type"""
        pass

    @abstractmethod
    async def attach_intent(self, payment: Payment) -> Payment:
        """Persist a reissued pending payment (new intent ref and amount)"""
        pass

    @abstractmethod
    async def complete_if_pending(
        self,
        payment_id: int,
        *,
        transaction_ref: Optional[str],
        paid_at: datetime,
    ) -> bool:
        """
        Conditional pending -> completed transition.

        Returns True only for the call that actually moved the row; every
        replay afterwards returns False and leaves paid_at untouched.
        """
        pass

    @abstractmethod
    async def fail_if_pending(self, payment_id: int) -> bool:
        """Conditional pending -> failed transition"""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: int) -> List[Payment]:
        """All payments of a user, newest first"""
        pass

    @abstractmethod
    async def exists_for_contest(self, contest_id: int) -> bool:
        """Whether any payment, in any status, references the contest"""
        pass

    @abstractmethod
    async def list_pending_before(
        self,
        cutoff: datetime,
        limit: int = 100,
        *,
        after_id: Optional[int] = None,
        not_before: Optional[datetime] = None,
    ) -> List[Payment]:
        """
        Pending payments created before ``cutoff``, ordered by id.

        ``after_id`` is a keyset cursor for paging through the backlog;
        ``not_before`` drops rows older than the reconciliation window.
        """
        pass
