from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from scrs.core.database import get_db
from scrs.core.permissions import get_admin_user, get_current_user
from scrs.models.user import User
from scrs.schemas.department import DepartmentCreate, DepartmentResponse, DepartmentUpdate
from scrs.services.department_service import DepartmentService

router = APIRouter()


@router.get("", response_model=List[DepartmentResponse])
def list_departments(
    active_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return DepartmentService(db).list_departments(active_only=active_only)


@router.get("/{department_id}", response_model=DepartmentResponse)
def get_department(
    department_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return DepartmentService(db).get_department(department_id)


@router.post("", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
def create_department(
    data: DepartmentCreate,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return DepartmentService(db).create_department(data, admin)


@router.put("/{department_id}", response_model=DepartmentResponse)
def update_department(
    department_id: int,
    data: DepartmentUpdate,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return DepartmentService(db).update_department(department_id, data, admin)


@router.put("/{department_id}/activate", response_model=DepartmentResponse)
def activate_department(
    department_id: int,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return DepartmentService(db).set_active(department_id, True, admin)


@router.put("/{department_id}/deactivate", response_model=DepartmentResponse)
def deactivate_department(
    department_id: int,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return DepartmentService(db).set_active(department_id, False, admin)


@router.delete("/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_department(
    department_id: int,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    DepartmentService(db).delete_department(department_id, admin)
