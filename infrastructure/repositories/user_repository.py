"""
User repository - SQLAlchemy implementation
"""
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging_config import get_logger
from domain.common.exceptions import ConflictException
from domain.user.entity import Role, User
from domain.user.repository import UserRepository
from infrastructure.models.user import UserModel
from shared.codes import BusinessCode


logger = get_logger(__name__)


class SQLAlchemyUserRepository(UserRepository):
    """SQLAlchemy implementation of UserRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            role=Role(model.role),
            photo_url=model.photo_url or "",
            wins_count=model.wins_count,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: User) -> UserModel:
        return UserModel(
            id=entity.id,
            name=entity.name,
            email=entity.email,
            role=entity.role.value,
            photo_url=entity.photo_url,
            wins_count=entity.wins_count,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def create(self, user: User) -> User:
        try:
            db_user = self._to_model(user)
            self.session.add(db_user)
            await self.session.flush()  # assigns the id
            await self.session.refresh(db_user)
            return self._to_entity(db_user)
        except IntegrityError:
            await self.session.rollback()
            logger.warning("create_user_conflict", field="email", email=user.email)
            raise ConflictException(
                BusinessCode.BUSINESS_ERROR,
                "Email already registered",
                "UserAlreadyExists",
                {"email": user.email},
            )

    async def get_by_id(self, user_id: int) -> Optional[User]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id).execution_options(populate_existing=True)
        )
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email.strip().lower())
        )
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

    async def increment_wins(self, user_id: int) -> bool:
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(wins_count=UserModel.wins_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
