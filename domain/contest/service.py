"""
Contest domain service - winner declaration
"""
from datetime import datetime, timezone
from typing import Optional

from domain.common.exceptions import UserNotFoundException, WinnerAlreadyDeclaredException
from domain.user.repository import UserRepository

from .entity import Contest
from .repository import ContestRepository


class ContestDomainService:

    def __init__(self, contest_repository: ContestRepository, user_repository: UserRepository):
        self.contest_repository = contest_repository
        self.user_repository = user_repository

    async def declare_winner(
        self,
        contest: Contest,
        winner_user_id: int,
        now: Optional[datetime] = None,
    ) -> Contest:
        """
        Set the winner once and bump their win counter.

        Both writes go through conditional/atomic updates so a concurrent
        second declaration cannot double-count a win.
        """
        contest.ensure_winner_declarable(now or datetime.now(timezone.utc))

        winner = await self.user_repository.get_by_id(winner_user_id)
        if winner is None:
            raise UserNotFoundException(winner_user_id, "Winner user not found")

        if not await self.contest_repository.set_winner_if_unset(contest.id, winner_user_id):
            raise WinnerAlreadyDeclaredException(contest.id)
        if not await self.user_repository.increment_wins(winner_user_id):
            raise UserNotFoundException(winner_user_id, "Winner user not found")

        contest.winner_user_id = winner_user_id
        return contest
