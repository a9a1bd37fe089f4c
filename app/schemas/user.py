"""
User Schemas - Pydantic models for request/response validation
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, field_validator

from app.models.user import UserRole
from app.schemas.common import Pagination

PASSWORD_MIN_LENGTH = 6

def _validate_password(v: str) -> str:
    if len(v) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    return v

class UserCreate(BaseModel):
    """Schema for user registration - new accounts always get the user role"""
    email: EmailStr
    password: str  # Plaintext password (hashed before storage)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return _validate_password(v)

class UserLogin(BaseModel):
    """Schema for login request"""
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

class UserResponse(BaseModel):
    """Schema for user data in responses - excludes password hash"""
    id: int
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class UserUpdate(BaseModel):
    """
    Patch for a user - only fields present are applied.
    role is honoured for admins only; the route drops it for everyone else.
    """
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower() if v else v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return _validate_password(v) if v is not None else v

    def changes(self) -> dict:
        return {field: value for field, value in self.model_dump(exclude_unset=True).items() if value is not None}

class TokenResponse(BaseModel):
    """Schema for authentication token response"""
    success: bool = True
    message: str
    token: str  # JWT
    token_type: str = "bearer"
    user: UserResponse

class UserDetailResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: UserResponse

class UserListResponse(BaseModel):
    success: bool = True
    users: List[UserResponse]
    pagination: Pagination
