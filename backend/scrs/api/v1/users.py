from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from scrs.core.database import get_db
from scrs.core.permissions import get_admin_user, get_current_user
from scrs.models.user import User, UserRole
from scrs.schemas.user import PasswordChange, SelfPasswordChange, UserResponse
from scrs.services.user_service import UserService

router = APIRouter()


@router.put("/me/password", response_model=UserResponse)
def change_my_password(
    data: SelfPasswordChange,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return UserService(db).change_own_password(current_user, data.current_password, data.new_password)


@router.get("", response_model=List[UserResponse])
def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return UserService(db).list_users(skip=skip, limit=limit)


@router.get("/students", response_model=List[UserResponse])
def list_students(admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return UserService(db).list_by_role(UserRole.STUDENT)


@router.get("/staff", response_model=List[UserResponse])
def list_staff(admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return UserService(db).list_by_role(UserRole.STAFF)


@router.get("/admins", response_model=List[UserResponse])
def list_admins(admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return UserService(db).list_by_role(UserRole.ADMIN)


@router.get("/role/{role}", response_model=List[UserResponse])
def list_by_role(role: UserRole, admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return UserService(db).list_by_role(role)


@router.get("/department/{department_id}", response_model=List[UserResponse])
def list_by_department(
    department_id: int,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return UserService(db).list_by_department(department_id)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return UserService(db).get_user(user_id)


@router.put("/{user_id}/activate", response_model=UserResponse)
def activate_user(user_id: int, admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return UserService(db).set_active(user_id, True, admin)


@router.put("/{user_id}/deactivate", response_model=UserResponse)
def deactivate_user(user_id: int, admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return UserService(db).set_active(user_id, False, admin)


@router.put("/{user_id}/password", response_model=UserResponse)
def reset_password(
    user_id: int,
    data: PasswordChange,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return UserService(db).change_password(user_id, data.new_password, admin)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    UserService(db).delete_user(user_id, admin)
