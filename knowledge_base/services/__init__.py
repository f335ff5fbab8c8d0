"""
Service layer
"""
from knowledge_base.services.auth import (
    verify_password, get_password_hash, authenticate_user, is_allowed_email,
    create_access_token, decode_token, get_current_user, get_optional_user,
    get_current_active_admin, update_last_login
)
from knowledge_base.services.rate_limiter import rate_limiter, rate_limit, get_rate_limiter
from knowledge_base.services.search import search_service

__all__ = [
    # Auth
    "verify_password", "get_password_hash", "authenticate_user", "is_allowed_email",
    "create_access_token", "decode_token", "get_current_user", "get_optional_user",
    "get_current_active_admin", "update_last_login",
    # Rate limiting
    "rate_limiter", "rate_limit", "get_rate_limiter",
    # Services
    "search_service",
]
