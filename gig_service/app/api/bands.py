# app/api/bands.py

from fastapi import APIRouter, Depends

from app.api.dependencies import (
    get_band_interactor,
    get_current_profile,
    get_current_user_id,
)
from app.infrastructure import schemas
from app.interactors.band_interactor import BandInteractor

router = APIRouter()


@router.post("/", response_model=schemas.Band)
async def create_band(
    band: schemas.BandCreate,
    band_interactor: BandInteractor = Depends(get_band_interactor),
    current_profile: schemas.UserProfile = Depends(get_current_profile),
):
    return await band_interactor.create_band(band, current_profile.id)


@router.get("/{band_id}", response_model=schemas.Band)
async def read_band(
    band_id: str,
    band_interactor: BandInteractor = Depends(get_band_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await band_interactor.get_band(band_id)


@router.post("/{band_id}/invitations", response_model=schemas.BandInvitation)
async def send_invitation(
    band_id: str,
    invitation: schemas.BandInvitationCreate,
    band_interactor: BandInteractor = Depends(get_band_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await band_interactor.send_invitation(band_id, invitation, current_user_id)


@router.post("/{band_id}/applications", response_model=schemas.BandApplication)
async def apply_to_band(
    band_id: str,
    application: schemas.BandApplicationCreate,
    band_interactor: BandInteractor = Depends(get_band_interactor),
    current_profile: schemas.UserProfile = Depends(get_current_profile),
):
    return await band_interactor.apply_to_band(band_id, application, current_profile.id)
