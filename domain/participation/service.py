"""
Participation domain service - the admission gate
"""
from datetime import datetime, timezone
from typing import Optional

from domain.common.exceptions import (
    AlreadyJoinedException,
    ContestFullException,
    ContestNotFoundException,
    DeadlinePassedException,
    PaymentNotFoundException,
    SubmissionNotFoundException,
    UserNotFoundException,
)
from domain.contest.repository import ContestRepository
from domain.payment.repository import PaymentRepository
from domain.user.repository import UserRepository

from .entity import Participation
from .repository import ParticipationRepository


class ParticipationDomainService:
    """
    Turns a completed entry payment into exactly one participation.

    Checks run in a fixed order (payment, contest status, capacity,
    deadline, existing row); the insert and the counter increment must run
    in the same transaction so a full contest rolls the insert back.
    """

    def __init__(
        self,
        participation_repository: ParticipationRepository,
        contest_repository: ContestRepository,
        payment_repository: PaymentRepository,
        user_repository: UserRepository,
    ):
        self.participation_repository = participation_repository
        self.contest_repository = contest_repository
        self.payment_repository = payment_repository
        self.user_repository = user_repository

    async def admit(
        self,
        *,
        user_id: int,
        contest_id: int,
        payment_id: int,
        submission_link: Optional[str] = None,
        now: Optional[datetime] = None,
        enforce_capacity: bool = True,
    ) -> Participation:
        now = now or datetime.now(timezone.utc)

        payment = await self.payment_repository.get_by_id(payment_id)
        if payment is None or not payment.funds_entry(user_id, contest_id):
            raise PaymentNotFoundException(payment_id, "Payment not found or not completed")

        contest = await self.contest_repository.get_by_id(contest_id)
        if contest is None:
            raise ContestNotFoundException(contest_id)
        contest.ensure_open_for_admission(now)

        if await self.participation_repository.get_for(contest_id, user_id) is not None:
            raise AlreadyJoinedException(user_id, contest_id)

        user = await self.user_repository.get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(user_id)

        participation = await self.participation_repository.create(Participation(
            id=None,
            contest_id=contest_id,
            user_id=user_id,
            payment_id=payment_id,
            submission_link=submission_link or "",
            user_name=user.name,
            user_email=user.email,
            created_at=now,
            updated_at=now,
        ))

        admitted = await self.contest_repository.increment_participants(
            contest_id, enforce_limit=enforce_capacity
        )
        if not admitted:
            # the caller's transaction rolls the insert back
            raise ContestFullException(contest_id, contest.participation_limit)
        return participation

    async def update_submission(
        self,
        *,
        user_id: int,
        submission_id: int,
        submission_link: Optional[str] = None,
        submission_text: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Participation:
        now = now or datetime.now(timezone.utc)
        participation = await self.participation_repository.get_by_id(submission_id)
        if participation is None:
            raise SubmissionNotFoundException(submission_id)
        participation.ensure_owned_by(user_id)

        contest = await self.contest_repository.get_by_id(participation.contest_id)
        if contest is None:
            raise ContestNotFoundException(participation.contest_id)
        if contest.deadline_passed(now):
            raise DeadlinePassedException(
                contest.id, "Cannot update submission after contest deadline"
            )

        participation.update_submission(submission_link, submission_text)
        return await self.participation_repository.update(participation)
