"""
User schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class UserBase(BaseModel):
    """Base user schema"""
    email: str = Field(..., min_length=3, max_length=320)
    full_name: str = Field(..., min_length=1, max_length=100)


class UserCreate(UserBase):
    """Schema for signing up"""
    password: str = Field(..., min_length=8, max_length=72)


class UserResponse(UserBase):
    """Schema for user response"""
    id: int
    role: str
    avatar_url: Optional[str]
    is_active: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    last_login_at: Optional[datetime]

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Schema for updating the current user's profile"""
    full_name: str = Field(..., max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)


class RoleUpdate(BaseModel):
    """Schema for changing another user's role (admin only)"""
    user_id: int
    role: str = Field(..., pattern="^(admin|member)$")


class Token(BaseModel):
    """Schema for token response"""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Schema for token data"""
    email: Optional[str] = None
    role: Optional[str] = None


class PasswordChange(BaseModel):
    """Schema for password change"""
    old_password: str
    new_password: str = Field(..., min_length=8, max_length=72)
    confirm_password: str
