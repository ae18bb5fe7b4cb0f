from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from scrs.core.database import get_db
from scrs.core.permissions import get_current_user, security
from scrs.models.user import User
from scrs.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, TokenValidationResponse
from scrs.schemas.user import UserResponse
from scrs.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    return AuthService(db).register(data)


@router.post("/login", response_model=TokenResponse)
async def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    return await AuthService(db).login(login_data)


@router.get("/validate", response_model=TokenValidationResponse)
def validate_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
):
    token = credentials.credentials if credentials else None
    return AuthService(db).validate_token(token)


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
