"""
Admin router
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session
from knowledge_base.database import get_db
from knowledge_base.schemas.admin import CleanupRequest, CleanupResponse
from knowledge_base.schemas.user import RoleUpdate, UserResponse
from knowledge_base.services.auth import get_current_active_admin
from knowledge_base.models.user import User
from knowledge_base.models.category import Category
from knowledge_base.models.article import Article, ArticleCategory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_admin),
    db: Session = Depends(get_db)
):
    """
    List all users (admin only)
    """
    users = db.query(User).order_by(User.id).offset(skip).limit(limit).all()
    return [UserResponse.model_validate(user) for user in users]


@router.patch("/users/role", response_model=UserResponse)
async def update_user_role(
    role_data: RoleUpdate,
    current_user: User = Depends(get_current_active_admin),
    db: Session = Depends(get_db)
):
    """
    Change another user's role (admin only)
    """
    if role_data.user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot change your own role"
        )

    user = db.query(User).filter(User.id == role_data.user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    user.role = role_data.role
    db.commit()
    db.refresh(user)

    logger.info(f"User {user.id} role changed to {user.role} by admin {current_user.id}")
    return UserResponse.model_validate(user)


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_content(
    cleanup_data: CleanupRequest,
    current_user: User = Depends(get_current_active_admin),
    db: Session = Depends(get_db)
):
    """
    Delete all articles, and optionally all categories (admin only)

    Steps commit one after another; if a later step fails the earlier
    deletions stay in place.
    """
    deleted = {"article_categories": 0, "articles": 0, "categories": 0}

    deleted["article_categories"] = db.query(ArticleCategory).delete(synchronize_session=False)
    db.commit()

    deleted["articles"] = db.query(Article).delete(synchronize_session=False)
    db.commit()

    if cleanup_data.delete_categories:
        # Leaves before parents so the self-referencing foreign key never blocks a delete
        for _ in range(3):
            parent_ids = select(Category.parent_id).where(Category.parent_id.isnot(None))
            deleted["categories"] += (
                db.query(Category).filter(Category.id.notin_(parent_ids)).delete(synchronize_session=False)
            )
            db.commit()

    remaining = {
        "articles": db.query(Article).count(),
        "categories": db.query(Category).count(),
    }
    logger.warning(f"Admin {current_user.id} ran content cleanup: deleted={deleted} remaining={remaining}")
    return CleanupResponse(success=True, deleted=deleted, remaining=remaining)
