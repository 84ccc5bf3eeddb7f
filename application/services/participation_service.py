"""
Participation admission use-cases.
"""
from __future__ import annotations

from typing import Callable, List

from application.dtos.participations import (
    AdmitRequest,
    ParticipationDTO,
    UpdateSubmissionRequest,
)
from core.config import settings
from core.logging_config import get_logger
from domain.common.exceptions import ContestNotFoundException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.participation.service import ParticipationDomainService
from domain.user.entity import Identity


logger = get_logger(__name__)


class ParticipationApplicationService:
    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        *,
        enforce_capacity: bool | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._enforce_capacity = (
            settings.contest.enforce_capacity_atomically if enforce_capacity is None else enforce_capacity
        )

    @staticmethod
    def _domain(uow: AbstractUnitOfWork) -> ParticipationDomainService:
        return ParticipationDomainService(
            participation_repository=uow.participation_repository,
            contest_repository=uow.contest_repository,
            payment_repository=uow.payment_repository,
            user_repository=uow.user_repository,
        )

    async def admit(self, identity: Identity, req: AdmitRequest) -> ParticipationDTO:
        """Create the caller's participation from a completed entry payment.

        Insert and counter increment share one transaction: any rejection
        after the insert (contest filled up meanwhile) rolls both back.
        """
        async with self._uow_factory() as uow:
            participation = await self._domain(uow).admit(
                user_id=identity.user_id,
                contest_id=req.contest_id,
                payment_id=req.payment_id,
                submission_link=req.submission_link,
                enforce_capacity=self._enforce_capacity,
            )
        logger.info(
            "participation_admitted",
            participation_id=participation.id,
            contest_id=participation.contest_id,
            user_id=participation.user_id,
            payment_id=participation.payment_id,
        )
        return ParticipationDTO.model_validate(participation)

    async def update_submission(
        self, identity: Identity, submission_id: int, req: UpdateSubmissionRequest
    ) -> ParticipationDTO:
        async with self._uow_factory() as uow:
            participation = await self._domain(uow).update_submission(
                user_id=identity.user_id,
                submission_id=submission_id,
                submission_link=req.submission_link,
                submission_text=req.submission_text,
            )
        logger.info("submission_updated", participation_id=participation.id, user_id=identity.user_id)
        return ParticipationDTO.model_validate(participation)

    async def list_my_participations(self, identity: Identity) -> List[ParticipationDTO]:
        async with self._uow_factory(readonly=True) as uow:
            items = await uow.participation_repository.list_by_user(identity.user_id)
        return [ParticipationDTO.model_validate(p) for p in items]

    async def list_contest_submissions(self, identity: Identity, contest_id: int) -> List[ParticipationDTO]:
        async with self._uow_factory(readonly=True) as uow:
            contest = await uow.contest_repository.get_by_id(contest_id)
            if contest is None:
                raise ContestNotFoundException(contest_id)
            identity.require_owner(contest.creator_id, "You can only view submissions of your own contests")
            items = await uow.participation_repository.list_by_contest(contest_id)
        return [ParticipationDTO.model_validate(p) for p in items]
