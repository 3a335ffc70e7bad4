# app/api/invitations.py

from fastapi import APIRouter, Depends

from app.api.dependencies import get_band_interactor, get_current_user_id
from app.infrastructure import schemas
from app.interactors.band_interactor import BandInteractor

router = APIRouter()


@router.post("/{invitation_id}/accept", response_model=schemas.BandInvitation)
async def accept_invitation(
    invitation_id: str,
    band_interactor: BandInteractor = Depends(get_band_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await band_interactor.accept_invitation(invitation_id, current_user_id)


@router.post("/{invitation_id}/decline", response_model=schemas.BandInvitation)
async def decline_invitation(
    invitation_id: str,
    band_interactor: BandInteractor = Depends(get_band_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await band_interactor.decline_invitation(invitation_id, current_user_id)
