"""
Initialize database with default data
"""
import logging
from typing import Optional
import bcrypt
from sqlalchemy.orm import Session
from knowledge_base.models.user import User

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def init_default_data(db: Session, admin_email: str, admin_password: str) -> Optional[User]:
    """
    Create the first admin account when no admin exists yet

    Returns:
        The created admin, or None when an admin was already present
    """
    if db.query(User).filter(User.role == "admin").first():
        return None

    admin_user = User(
        email=admin_email.strip().lower(),
        password_hash=hash_password(admin_password),
        full_name="Administrator",
        role="admin",
        is_active=True,
    )
    db.add(admin_user)
    db.commit()
    db.refresh(admin_user)
    logger.info(f"Default admin user created ({admin_user.email})")
    return admin_user
