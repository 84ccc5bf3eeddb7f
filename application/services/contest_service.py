"""
Contest lifecycle use-cases: creation, edits, moderation and winner declaration.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from application.dtos.contests import ContestCreate, ContestDTO, ContestUpdate
from core.logging_config import get_logger
from domain.common.exceptions import (
    ContestHasPaymentsException,
    ContestNotFoundException,
    ForbiddenException,
    UserNotFoundException,
)
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.contest.entity import Contest, ContestStatus
from domain.contest.service import ContestDomainService
from domain.user.entity import Identity


logger = get_logger(__name__)


class ContestApplicationService:
    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def create_contest(self, identity: Identity, data: ContestCreate) -> ContestDTO:
        async with self._uow_factory() as uow:
            creator = await uow.user_repository.get_by_id(identity.user_id)
            if creator is None:
                raise UserNotFoundException(identity.user_id)
            now = datetime.now(timezone.utc)
            contest = await uow.contest_repository.create(Contest(
                id=None,
                name=data.name,
                description=data.description,
                task_instructions=data.task_instructions,
                contest_type=data.contest_type,
                price=data.price,
                prize_money=data.prize_money,
                deadline=data.deadline,
                participation_limit=data.participation_limit,
                creator_id=creator.id,
                creator_name=creator.name,
                status=ContestStatus.PENDING,
                created_at=now,
                updated_at=now,
            ))
        logger.info("contest_created", contest_id=contest.id, creator_id=contest.creator_id)
        return ContestDTO.model_validate(contest)

    async def update_contest(self, identity: Identity, contest_id: int, data: ContestUpdate) -> ContestDTO:
        async with self._uow_factory() as uow:
            contest = await self._load(uow, contest_id)
            identity.require_owner(contest.creator_id, "You can only update your own contests")
            was_confirmed = contest.is_confirmed
            # entity field names, not the camelCase wire aliases
            contest.apply_update(data.model_dump(by_alias=False, exclude_unset=True))
            contest = await uow.contest_repository.update(contest)
        logger.info(
            "contest_updated",
            contest_id=contest_id,
            reset_to_pending=was_confirmed and contest.status == ContestStatus.PENDING,
        )
        return ContestDTO.model_validate(contest)

    async def delete_contest(self, identity: Identity, contest_id: int) -> None:
        async with self._uow_factory() as uow:
            contest = await self._load(uow, contest_id)
            is_owner = contest.creator_id == identity.user_id
            if not identity.role.can_delete_contest(is_owner=is_owner):
                raise ForbiddenException("You can only delete your own contests")
            if not identity.role.can_moderate_contests() and contest.is_confirmed:
                raise ForbiddenException("Confirmed contests can only be deleted by an admin")
            # the payments ledger is durable; the FK is RESTRICT as well
            if await uow.payment_repository.exists_for_contest(contest_id):
                raise ContestHasPaymentsException(contest_id)
            await uow.contest_repository.delete(contest_id)
        logger.info("contest_deleted", contest_id=contest_id, by_user_id=identity.user_id)

    async def set_status(self, contest_id: int, status: ContestStatus) -> ContestDTO:
        async with self._uow_factory() as uow:
            contest = await self._load(uow, contest_id)
            contest.set_status(status)
            contest = await uow.contest_repository.update(contest)
        logger.info("contest_status_changed", contest_id=contest_id, status=contest.status.value)
        return ContestDTO.model_validate(contest)

    async def declare_winner(self, identity: Identity, contest_id: int, winner_user_id: int) -> ContestDTO:
        async with self._uow_factory() as uow:
            contest = await self._load(uow, contest_id)
            identity.require_owner(contest.creator_id, "You can only declare winners for your own contests")
            contest = await ContestDomainService(uow.contest_repository, uow.user_repository).declare_winner(
                contest, winner_user_id
            )
        logger.info("contest_winner_declared", contest_id=contest_id, winner_user_id=winner_user_id)
        return ContestDTO.model_validate(contest)

    @staticmethod
    async def _load(uow: AbstractUnitOfWork, contest_id: int) -> Contest:
        contest = await uow.contest_repository.get_by_id(contest_id)
        if contest is None:
            raise ContestNotFoundException(contest_id)
        return contest
