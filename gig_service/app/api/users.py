# app/api/users.py

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import (
    get_current_user_id,
    get_session_state,
    get_user_interactor,
)
from app.domain.session import SessionState
from app.infrastructure import schemas
from app.interactors.user_interactor import UserInteractor

router = APIRouter()


@router.get("/me", response_model=schemas.UserProfile)
async def read_users_me(session_state: SessionState = Depends(get_session_state)):
    if session_state.needs_profile_setup:
        raise HTTPException(status_code=404, detail="Profile setup required")
    return session_state.require_profile()


@router.put("/me", response_model=schemas.UserProfile)
async def update_user_me(
    profile: schemas.UserProfileUpdate,
    user_interactor: UserInteractor = Depends(get_user_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    return await user_interactor.upsert_profile(current_user_id, profile)


@router.get("/{user_id}", response_model=schemas.UserProfile)
async def read_user(
    user_id: str,
    user_interactor: UserInteractor = Depends(get_user_interactor),
    current_user_id: str = Depends(get_current_user_id),
):
    profile = await user_interactor.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile
