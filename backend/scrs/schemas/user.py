from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import datetime

from scrs.models.user import UserRole


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: str = ""
    role: UserRole
    is_active: bool
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserPage(BaseModel):
    content: List[UserResponse]
    total_elements: int
    total_pages: int
    number: int
    size: int


class AdminUserUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    role: Optional[UserRole] = None
    department_id: Optional[int] = None

    @field_validator('username', mode='before')
    @classmethod
    def strip_username(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


class UserStatusUpdate(BaseModel):
    enabled: bool


class PasswordChange(BaseModel):
    new_password: str = Field(..., min_length=6, max_length=72)


class SelfPasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=72)
