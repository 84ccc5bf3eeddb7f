"""
User database model - SQLAlchemy ORM
Infrastructure detail only; the business rules live in domain.user.entity.User
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from .base import Base


class UserModel(Base):
    """
    User table mapping

    No business logic here; see domain.user.entity.User
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(100), nullable=False, comment="Display name")
    email = Column(String(255), unique=True, index=True, nullable=False, comment="Email")
    photo_url = Column(String(500), nullable=False, default="", comment="Avatar URL")
    role = Column(String(20), nullable=False, default="user", index=True, comment="user/creator/admin")

    # only ever changed by an atomic UPDATE ... SET wins_count = wins_count + 1
    wins_count = Column(Integer, nullable=False, default=0, comment="Contests won")

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="Created at"
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="Updated at"
    )

    def __repr__(self):
        return f"<UserModel(id={self.id}, email='{self.email}', role='{self.role}')>"
