"""
Participation entity - a user's paid entry (and submission) in a contest
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from domain.common.exceptions import ForbiddenException
from domain.common.time_utils import ensure_utc

# A participation only exists once its payment is completed
PAYMENT_STATUS_PAID = "paid"


@dataclass
class Participation:
    """
    Participation entity

    (contest_id, user_id) is unique at the storage level; user_name and
    user_email are snapshots taken at admission time.
    """

    id: Optional[int]
    contest_id: int
    user_id: int
    payment_id: int
    submission_link: str = ""
    submission_text: str = ""
    payment_status: str = PAYMENT_STATUS_PAID
    user_name: str = ""
    user_email: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.submission_link = self.submission_link or ""
        self.submission_text = self.submission_text or ""
        self.created_at = ensure_utc(self.created_at)
        self.updated_at = ensure_utc(self.updated_at)

    def ensure_owned_by(self, user_id: int) -> None:
        if self.user_id != user_id:
            raise ForbiddenException(
                "You can only update your own submission",
                details={"submission_id": self.id},
            )

    def update_submission(
        self,
        submission_link: Optional[str] = None,
        submission_text: Optional[str] = None,
    ) -> None:
        if submission_link is not None:
            self.submission_link = submission_link
        if submission_text is not None:
            self.submission_text = submission_text
        self.updated_at = datetime.now(timezone.utc)
