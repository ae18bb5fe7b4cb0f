from pydantic import BaseModel
from typing import Dict, List
from datetime import datetime


class ComplaintStatusCounts(BaseModel):
    total: int
    pending: int               # NEW
    in_progress: int           # ASSIGNED
    resolved: int              # CLOSED
    confirmed_by_student: int  # CONFIRMED_BY_STUDENT
    by_status: Dict[str, int]
    by_type: Dict[str, int]


class SystemStats(BaseModel):
    total_users: int
    active_users: int
    total_complaints: int
    pending_complaints: int
    in_progress_complaints: int
    resolved_complaints: int
    confirmed_by_student_complaints: int
    complaints_by_type: Dict[str, int]
    total_departments: int
    active_departments: int
    inactive_departments: int


class AverageResolutionTime(BaseModel):
    average_hours: float


class MostActiveDepartment(BaseModel):
    department_name: str
    complaint_count: int


class SatisfactionRate(BaseModel):
    rate: float


class ActivityItem(BaseModel):
    type: str
    description: str
    timestamp: datetime


class RegistrationTrends(BaseModel):
    labels: List[str]
    data: List[int]
