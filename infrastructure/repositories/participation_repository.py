"""
Participation repository - SQLAlchemy implementation
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging_config import get_logger
from domain.common.exceptions import AlreadyJoinedException, SubmissionNotFoundException
from domain.participation.entity import Participation
from domain.participation.repository import ParticipationRepository
from infrastructure.models.participation import ParticipationModel


logger = get_logger(__name__)


class SQLAlchemyParticipationRepository(ParticipationRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: ParticipationModel) -> Participation:
        return Participation(
            id=model.id,
            contest_id=model.contest_id,
            user_id=model.user_id,
            payment_id=model.payment_id,
            submission_link=model.submission_link,
            submission_text=model.submission_text,
            payment_status=model.payment_status,
            user_name=model.user_name,
            user_email=model.user_email,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Participation) -> ParticipationModel:
        return ParticipationModel(
            id=entity.id,
            contest_id=entity.contest_id,
            user_id=entity.user_id,
            payment_id=entity.payment_id,
            submission_link=entity.submission_link,
            submission_text=entity.submission_text,
            payment_status=entity.payment_status,
            user_name=entity.user_name,
            user_email=entity.user_email,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def create(self, participation: Participation) -> Participation:
        try:
            db_item = self._to_model(participation)
            self.session.add(db_item)
            await self.session.flush()
            await self.session.refresh(db_item)
            return self._to_entity(db_item)
        except IntegrityError as e:
            await self.session.rollback()
            msg = str(e).lower()
            if "unique" in msg or "duplicate" in msg:
                # a concurrent admission won the race past the pre-check
                logger.warning(
                    "participation_create_conflict",
                    contest_id=participation.contest_id,
                    user_id=participation.user_id,
                )
                raise AlreadyJoinedException(participation.user_id, participation.contest_id)
            raise

    async def get_by_id(self, participation_id: int) -> Optional[Participation]:
        result = await self.session.execute(
            select(ParticipationModel).where(ParticipationModel.id == participation_id)
        )
        db_item = result.scalar_one_or_none()
        return self._to_entity(db_item) if db_item else None

    async def get_for(self, contest_id: int, user_id: int) -> Optional[Participation]:
        result = await self.session.execute(
            select(ParticipationModel).where(
                ParticipationModel.contest_id == contest_id,
                ParticipationModel.user_id == user_id,
            )
        )
        db_item = result.scalar_one_or_none()
        return self._to_entity(db_item) if db_item else None

    async def update(self, participation: Participation) -> Participation:
        result = await self.session.execute(
            select(ParticipationModel).where(ParticipationModel.id == participation.id)
        )
        db_item = result.scalar_one_or_none()
        if not db_item:
            raise SubmissionNotFoundException(participation.id)

        db_item.submission_link = participation.submission_link
        db_item.submission_text = participation.submission_text
        db_item.updated_at = participation.updated_at

        await self.session.flush()
        await self.session.refresh(db_item)
        return self._to_entity(db_item)

    async def list_by_user(self, user_id: int) -> List[Participation]:
        result = await self.session.execute(
            select(ParticipationModel)
            .where(ParticipationModel.user_id == user_id)
            .order_by(ParticipationModel.created_at.desc(), ParticipationModel.id.desc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def list_by_contest(self, contest_id: int) -> List[Participation]:
        result = await self.session.execute(
            select(ParticipationModel)
            .where(ParticipationModel.contest_id == contest_id)
            .order_by(ParticipationModel.created_at.asc(), ParticipationModel.id.asc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]
