"""
Contest repository - SQLAlchemy implementation

Counters and the winner are only written with single conditional UPDATE
statements, never loaded, modified and saved.
"""
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging_config import get_logger
from domain.common.exceptions import ContestNotFoundException
from domain.contest.entity import Contest, ContestStatus
from domain.contest.repository import ContestRepository
from infrastructure.models.contest import ContestModel


logger = get_logger(__name__)


class SQLAlchemyContestRepository(ContestRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: ContestModel) -> Contest:
        return Contest(
            id=model.id,
            name=model.name,
            description=model.description or "",
            task_instructions=model.task_instructions or "",
            contest_type=model.contest_type or "",
            price=Decimal(str(model.price)),
            prize_money=Decimal(str(model.prize_money)),
            deadline=model.deadline,
            creator_id=model.creator_id,
            creator_name=model.creator_name or "",
            status=ContestStatus(model.status),
            participation_limit=model.participation_limit,
            participants_count=model.participants_count,
            winner_user_id=model.winner_user_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Contest) -> ContestModel:
        return ContestModel(
            id=entity.id,
            name=entity.name,
            description=entity.description,
            task_instructions=entity.task_instructions,
            contest_type=entity.contest_type,
            price=entity.price,
            prize_money=entity.prize_money,
            deadline=entity.deadline,
            creator_id=entity.creator_id,
            creator_name=entity.creator_name,
            status=entity.status.value,
            participation_limit=entity.participation_limit,
            participants_count=entity.participants_count,
            winner_user_id=entity.winner_user_id,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def create(self, contest: Contest) -> Contest:
        db_contest = self._to_model(contest)
        self.session.add(db_contest)
        await self.session.flush()
        await self.session.refresh(db_contest)
        logger.info("contest_row_created", contest_id=db_contest.id, creator_id=db_contest.creator_id)
        return self._to_entity(db_contest)

    async def get_by_id(self, contest_id: int) -> Optional[Contest]:
        result = await self.session.execute(
            select(ContestModel)
            .where(ContestModel.id == contest_id)
            .execution_options(populate_existing=True)
        )
        db_contest = result.scalar_one_or_none()
        return self._to_entity(db_contest) if db_contest else None

    async def update(self, contest: Contest) -> Contest:
        result = await self.session.execute(
            select(ContestModel).where(ContestModel.id == contest.id)
        )
        db_contest = result.scalar_one_or_none()
        if not db_contest:
            raise ContestNotFoundException(contest.id)

        db_contest.name = contest.name
        db_contest.description = contest.description
        db_contest.task_instructions = contest.task_instructions
        db_contest.contest_type = contest.contest_type
        db_contest.price = contest.price
        db_contest.prize_money = contest.prize_money
        db_contest.deadline = contest.deadline
        db_contest.participation_limit = contest.participation_limit
        db_contest.status = contest.status.value
        db_contest.updated_at = contest.updated_at

        await self.session.flush()
        await self.session.refresh(db_contest)
        return self._to_entity(db_contest)

    async def delete(self, contest_id: int) -> bool:
        result = await self.session.execute(
            delete(ContestModel).where(ContestModel.id == contest_id)
        )
        return result.rowcount > 0

    async def increment_participants(self, contest_id: int, *, enforce_limit: bool = True) -> bool:
        stmt = update(ContestModel).where(ContestModel.id == contest_id)
        if enforce_limit:
            stmt = stmt.where(
                or_(
                    ContestModel.participation_limit == 0,
                    ContestModel.participants_count < ContestModel.participation_limit,
                )
            )
        result = await self.session.execute(
            stmt.values(participants_count=ContestModel.participants_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_winner_if_unset(self, contest_id: int, winner_user_id: int) -> bool:
        result = await self.session.execute(
            update(ContestModel)
            .where(ContestModel.id == contest_id, ContestModel.winner_user_id.is_(None))
            .values(winner_user_id=winner_user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
