"""
Participation repository interface
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from .entity import Participation


class ParticipationRepository(ABC):

    @abstractmethod
    async def create(self, participation: Participation) -> Participation:
        """
        Insert a participation.

        A second row for the same (contest_id, user_id) must raise
        AlreadyJoinedException, whether caught by a pre-check or by the
        storage-level unique constraint.
        """
        pass

    @abstractmethod
    async def get_by_id(self, participation_id: int) -> Optional[Participation]:
        pass

    @abstractmethod
    async def get_for(self, contest_id: int, user_id: int) -> Optional[Participation]:
        pass

    @abstractmethod
    async def update(self, participation: Participation) -> Participation:
        """Persist submission_link / submission_text"""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: int) -> List[Participation]:
        pass

    @abstractmethod
    async def list_by_contest(self, contest_id: int) -> List[Participation]:
        pass
