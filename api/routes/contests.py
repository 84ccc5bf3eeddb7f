"""
Contest lifecycle routes
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from api.dependencies import get_contest_service, require_roles
from application.dtos.contests import ContestCreate, ContestStatusUpdate, ContestUpdate, WinnerDeclaration
from application.services.contest_service import ContestApplicationService
from core.response import success_response
from domain.user.entity import Identity, Role


router = APIRouter(prefix="/contests", tags=["Contests"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a contest (pending approval)")
async def create_contest(
    payload: ContestCreate,
    identity: Identity = Depends(require_roles(Role.CREATOR)),
    service: ContestApplicationService = Depends(get_contest_service),
):
    return success_response(data=await service.create_contest(identity, payload), message="Contest created")


@router.put("/{contest_id}", summary="Update my contest")
async def update_contest(
    contest_id: int,
    payload: ContestUpdate,
    identity: Identity = Depends(require_roles(Role.CREATOR)),
    service: ContestApplicationService = Depends(get_contest_service),
):
    return success_response(data=await service.update_contest(identity, contest_id, payload), message="Contest updated")


@router.delete("/{contest_id}", summary="Delete a contest")
async def delete_contest(
    contest_id: int,
    identity: Identity = Depends(require_roles(Role.CREATOR, Role.ADMIN)),
    service: ContestApplicationService = Depends(get_contest_service),
):
    await service.delete_contest(identity, contest_id)
    return success_response(data={"id": contest_id}, message="Contest deleted")


@router.patch("/{contest_id}/status", summary="Approve or unapprove a contest")
async def set_contest_status(
    contest_id: int,
    payload: ContestStatusUpdate,
    identity: Identity = Depends(require_roles(Role.ADMIN)),
    service: ContestApplicationService = Depends(get_contest_service),
):
    return success_response(data=await service.set_status(contest_id, payload.status), message="Contest status updated")


@router.patch("/{contest_id}/winner", summary="Declare the winner")
async def declare_winner(
    contest_id: int,
    payload: WinnerDeclaration,
    identity: Identity = Depends(require_roles(Role.CREATOR)),
    service: ContestApplicationService = Depends(get_contest_service),
):
    contest = await service.declare_winner(identity, contest_id, payload.winner_user_id)
    return success_response(data=contest, message="Winner declared")
