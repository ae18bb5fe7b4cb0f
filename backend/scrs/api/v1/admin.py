from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from scrs.core.database import get_db
from scrs.core.permissions import get_admin_user
from scrs.models.user import User, UserRole
from scrs.schemas.stats import (
    ActivityItem,
    AverageResolutionTime,
    MostActiveDepartment,
    RegistrationTrends,
    SatisfactionRate,
    SystemStats,
)
from scrs.schemas.user import AdminUserUpdate, UserPage, UserResponse, UserStatusUpdate
from scrs.services.stats_service import StatsService
from scrs.services.user_service import UserService

router = APIRouter()


@router.get("/users", response_model=UserPage)
def search_users(
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=200),
    role: Optional[UserRole] = None,
    status: Optional[str] = Query(None, pattern="^(active|inactive)$"),
    search: Optional[str] = None,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    is_active = None if status is None else status == "active"
    return UserService(db).search_users(page=page, size=size, role=role, is_active=is_active, search=search)


@router.get("/users/stats/trends", response_model=RegistrationTrends)
def registration_trends(admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return StatsService(db).get_registration_trends()


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return UserService(db).get_user(user_id)


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    update: AdminUserUpdate,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return UserService(db).update_user(user_id, update, admin)


@router.put("/users/{user_id}/status", response_model=UserResponse)
def update_user_status(
    user_id: int,
    data: UserStatusUpdate,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return UserService(db).set_active(user_id, data.enabled, admin)


@router.get("/stats", response_model=SystemStats)
def system_stats(admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return StatsService(db).get_system_stats()


@router.get("/stats/avg-resolution-time", response_model=AverageResolutionTime)
def average_resolution_time(admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return StatsService(db).get_average_resolution_time()


@router.get("/stats/most-active-department", response_model=MostActiveDepartment)
def most_active_department(admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return StatsService(db).get_most_active_department()


@router.get("/stats/satisfaction-rate", response_model=SatisfactionRate)
def satisfaction_rate(admin: User = Depends(get_admin_user), db: Session = Depends(get_db)):
    return StatsService(db).get_satisfaction_rate()


@router.get("/activity/recent", response_model=List[ActivityItem])
def recent_activity(
    limit: int = Query(10, ge=1, le=100),
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return StatsService(db).get_recent_activity(limit)
