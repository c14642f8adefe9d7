"""User profile routes."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession

from excel_quiz.database import get_db
from excel_quiz.dependencies.auth import get_current_user
from excel_quiz.models.auth import ProfileUpdateRequest, UserResponse
from excel_quiz.models.db.user import User
from excel_quiz.services.auth_service import update_profile

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me/profile", response_model=UserResponse)
async def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user's profile."""
    return current_user


@router.patch("/me/profile", response_model=UserResponse)
async def patch_profile(
    data: ProfileUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> User:
    """Update display name and avatar URL. Empty strings clear a field."""
    return update_profile(
        db,
        current_user,
        display_name=data.display_name,
        avatar_url=data.avatar_url,
    )
