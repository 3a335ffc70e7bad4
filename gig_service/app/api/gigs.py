# app/api/gigs.py
from typing import Any

from fastapi import APIRouter, Body, Depends

from app.api.dependencies import (
    get_current_profile,
    get_current_user_id,
    get_gig_interactor,
)
from app.domain.entities import UserRole
from app.domain.errors import PermissionDeniedError
from app.infrastructure import schemas
from app.interactors.gig_interactor import GigInteractor

router = APIRouter()


@router.post("/", response_model=schemas.Gig)
async def create_gig(
    # validated by the interactor so failures surface as GigValidationError
    payload: dict[str, Any] = Body(...),
    gig_interactor: GigInteractor = Depends(get_gig_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await gig_interactor.create_gig(payload, current_user_id)


@router.post("/conversations/backfill", response_model=schemas.BackfillReport)
async def backfill_conversations(
    gig_interactor: GigInteractor = Depends(get_gig_interactor),
    current_profile: schemas.UserProfile = Depends(get_current_profile),
):
    if current_profile.role is not UserRole.ADMIN:
        raise PermissionDeniedError("Backfill is restricted to admins")
    return await gig_interactor.backfill_conversations()


@router.post(
    "/applications/{application_id}/respond", response_model=schemas.GigApplication
)
async def respond_to_application(
    application_id: str,
    response: schemas.GigApplicationResponse,
    gig_interactor: GigInteractor = Depends(get_gig_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await gig_interactor.respond_to_application(
        application_id, current_user_id, response
    )


@router.get("/{gig_id}", response_model=schemas.Gig)
async def read_gig(
    gig_id: str,
    gig_interactor: GigInteractor = Depends(get_gig_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await gig_interactor.get_gig(gig_id)


@router.post("/{gig_id}/applications", response_model=schemas.GigApplication)
async def apply_to_gig(
    gig_id: str,
    application: schemas.GigApplicationCreate,
    gig_interactor: GigInteractor = Depends(get_gig_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await gig_interactor.apply_to_gig(gig_id, application, current_user_id)
