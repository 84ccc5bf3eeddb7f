"""
Participation (submission) routes
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from api.dependencies import get_current_identity, get_participation_service, require_roles
from application.dtos.participations import AdmitRequest, SubmissionResponse, UpdateSubmissionRequest
from application.services.participation_service import ParticipationApplicationService
from core.response import success_response
from domain.user.entity import Identity, Role


router = APIRouter(prefix="/participations", tags=["Participations"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Join a contest with a completed payment")
async def join_contest(
    payload: AdmitRequest,
    identity: Identity = Depends(require_roles(Role.USER)),
    service: ParticipationApplicationService = Depends(get_participation_service),
):
    submission = await service.admit(identity, payload)
    return success_response(data=SubmissionResponse(submission=submission), message="Joined contest")


@router.patch("/{submission_id}", summary="Update my submission")
async def update_submission(
    submission_id: int,
    payload: UpdateSubmissionRequest,
    identity: Identity = Depends(get_current_identity),
    service: ParticipationApplicationService = Depends(get_participation_service),
):
    submission = await service.update_submission(identity, submission_id, payload)
    return success_response(data=SubmissionResponse(submission=submission), message="Submission updated")


@router.get("/me", summary="My participations")
async def my_participations(
    identity: Identity = Depends(get_current_identity),
    service: ParticipationApplicationService = Depends(get_participation_service),
):
    return success_response(data=await service.list_my_participations(identity))


@router.get("/contest/{contest_id}", summary="Submissions of one of my contests")
async def contest_submissions(
    contest_id: int,
    identity: Identity = Depends(require_roles(Role.CREATOR)),
    service: ParticipationApplicationService = Depends(get_participation_service),
):
    return success_response(data=await service.list_contest_submissions(identity, contest_id))
