"""
Participation DTOs
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class AdmitRequest(CamelModel):
    contest_id: int
    payment_id: int
    submission_link: Optional[str] = Field(default=None, max_length=2048)


class UpdateSubmissionRequest(CamelModel):
    submission_link: Optional[str] = Field(default=None, max_length=2048)
    submission_text: Optional[str] = None


class ParticipationDTO(CamelModel):
    id: int
    contest_id: int
    user_id: int
    payment_id: int
    submission_link: str = ""
    submission_text: str = ""
    payment_status: str
    user_name: str = ""
    user_email: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubmissionResponse(CamelModel):
    submission: ParticipationDTO
