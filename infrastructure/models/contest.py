"""
Contest database model - SQLAlchemy ORM
"""
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text

from .base import Base


class ContestModel(Base):
    """
    Contest table mapping

    participants_count and winner_user_id are written only through
    conditional UPDATE statements in the repository.
    """
    __tablename__ = "contests"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(200), nullable=False, comment="Contest name")
    description = Column(Text, nullable=False, default="", comment="Description")
    task_instructions = Column(Text, nullable=False, default="", comment="Task instructions")
    contest_type = Column(String(50), nullable=False, default="", index=True, comment="Category")

    price = Column(Numeric(precision=15, scale=2), nullable=False, comment="Entry fee")
    prize_money = Column(Numeric(precision=15, scale=2), nullable=False, default=0, comment="Prize")
    deadline = Column(DateTime(timezone=True), nullable=False, comment="Submission deadline")

    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, comment="Creator user id")
    creator_name = Column(String(100), nullable=False, default="", comment="Creator name snapshot")

    status = Column(String(20), nullable=False, default="pending", index=True, comment="pending/confirmed")
    participation_limit = Column(Integer, nullable=False, default=0, comment="0 means unlimited")
    participants_count = Column(Integer, nullable=False, default=0, comment="Admitted participants")
    winner_user_id = Column(Integer, ForeignKey("users.id"), nullable=True, comment="Declared winner")

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

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_contests_price_non_negative"),
        CheckConstraint("participation_limit >= 0", name="ck_contests_limit_non_negative"),
        CheckConstraint("participants_count >= 0", name="ck_contests_count_non_negative"),
        Index("ix_contests_creator_status", "creator_id", "status"),
    )

    def __repr__(self):
        return (
            f"<ContestModel(id={self.id}, name='{self.name}', status='{self.status}', "
            f"participants={self.participants_count}/{self.participation_limit})>"
        )
