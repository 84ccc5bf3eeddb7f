"""
Participation database model - SQLAlchemy ORM
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from .base import Base


class ParticipationModel(Base):
    """
    Participation (submission) table mapping

    The (contest_id, user_id) unique constraint is what actually prevents
    double admission under concurrency.
    """
    __tablename__ = "participations"

    id = Column(Integer, primary_key=True, index=True)

    contest_id = Column(
        Integer,
        ForeignKey("contests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Contest",
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, comment="Participant")
    payment_id = Column(Integer, ForeignKey("payments.id"), nullable=False, comment="Funding payment")

    submission_link = Column(String(2048), nullable=False, default="", comment="Submission link")
    submission_text = Column(Text, nullable=False, default="", comment="Submission text")
    payment_status = Column(String(20), nullable=False, default="paid", comment="Always paid")

    user_name = Column(String(100), nullable=False, default="", comment="Name snapshot")
    user_email = Column(String(255), nullable=False, default="", comment="Email snapshot")

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
        UniqueConstraint("contest_id", "user_id", name="uq_participations_contest_user"),
    )

    def __repr__(self):
        return (
            f"<ParticipationModel(id={self.id}, contest_id={self.contest_id}, user_id={self.user_id})>"
        )
