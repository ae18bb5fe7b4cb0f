from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, Any

from scrs.schemas.user import UserResponse


class LoginRequest(BaseModel):
    identifier: str = Field(..., description="Username or email")
    password: str

    @model_validator(mode='before')
    @classmethod
    def map_legacy_fields(cls, data: Any) -> Any:
        """
        Accept 'username' or 'usernameOrEmail' from older clients as 'identifier'.
        """
        if isinstance(data, dict) and 'identifier' not in data:
            for legacy in ('usernameOrEmail', 'username'):
                if data.get(legacy):
                    data = {**data, 'identifier': data[legacy]}
                    break
        return data


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    full_name: Optional[str] = Field(None, max_length=101)

    @field_validator('username', mode='before')
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class TokenValidationResponse(BaseModel):
    valid: bool
    user_id: Optional[int] = None
    username: Optional[str] = None
    role: Optional[str] = None
