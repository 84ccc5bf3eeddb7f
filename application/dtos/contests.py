"""
Contest DTOs
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from domain.contest.entity import ContestStatus

from .base import CamelModel, Money


class ContestCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    task_instructions: str = ""
    contest_type: str = Field(default="", max_length=50)
    price: Decimal = Field(ge=0)
    prize_money: Decimal = Field(default=Decimal("0"), ge=0)
    deadline: datetime
    participation_limit: int = Field(default=0, ge=0)


class ContestUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    task_instructions: Optional[str] = None
    contest_type: Optional[str] = Field(default=None, max_length=50)
    price: Optional[Decimal] = Field(default=None, ge=0)
    prize_money: Optional[Decimal] = Field(default=None, ge=0)
    deadline: Optional[datetime] = None
    participation_limit: Optional[int] = Field(default=None, ge=0)


class ContestStatusUpdate(CamelModel):
    status: ContestStatus


class WinnerDeclaration(CamelModel):
    winner_user_id: int


class ContestDTO(CamelModel):
    id: int
    name: str
    description: str = ""
    task_instructions: str = ""
    contest_type: str = ""
    price: Money
    prize_money: Money
    deadline: datetime
    creator_id: int
    creator_name: str = ""
    status: ContestStatus
    participation_limit: int
    participants_count: int
    winner_user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
