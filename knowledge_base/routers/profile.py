"""
Profile router
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from knowledge_base.database import get_db
from knowledge_base.schemas.user import ProfileUpdate, UserResponse
from knowledge_base.services.auth import get_current_user
from knowledge_base.services.content import is_safe_url, sanitize_user_input
from knowledge_base.models.user import User

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """
    Get the current user's profile
    """
    return UserResponse.model_validate(current_user)


@router.patch("", response_model=UserResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update name and avatar of the current user
    """
    full_name = sanitize_user_input(profile_data.full_name)
    if not full_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Validation failed", "errors": {"full_name": "Full name is required"}}
        )

    avatar_url = sanitize_user_input(profile_data.avatar_url) or None
    if avatar_url and not is_safe_url(avatar_url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Validation failed", "errors": {"avatar_url": "Avatar URL must be a relative or http(s) link"}}
        )

    current_user.full_name = full_name
    current_user.avatar_url = avatar_url
    db.commit()
    db.refresh(current_user)

    return UserResponse.model_validate(current_user)
