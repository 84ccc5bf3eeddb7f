"""
Contest repository interface
"""
from abc import ABC, abstractmethod
from typing import Optional

from .entity import Contest


class ContestRepository(ABC):

    @abstractmethod
    async def create(self, contest: Contest) -> Contest:
        pass

    @abstractmethod
    async def get_by_id(self, contest_id: int) -> Optional[Contest]:
        pass

    @abstractmethod
    async def update(self, contest: Contest) -> Contest:
        """Persist editable fields and status (never the counters or the winner)"""
        pass

    @abstractmethod
    async def delete(self, contest_id: int) -> bool:
        pass

    @abstractmethod
    async def increment_participants(self, contest_id: int, *, enforce_limit: bool = True) -> bool:
        """
        Atomically add one participant.

        With ``enforce_limit`` the increment only happens while
        participants_count is below a non-zero participation_limit.
        Returns False when no row was updated.
        """
        pass

    @abstractmethod
    async def set_winner_if_unset(self, contest_id: int, winner_user_id: int) -> bool:
        """Set winner_user_id only if it is still NULL; False if another call got there first"""
        pass
