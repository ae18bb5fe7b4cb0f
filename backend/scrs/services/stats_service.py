import logging
from datetime import datetime, timedelta
from typing import List

from sqlalchemy.orm import Session

from scrs.models.complaint import ComplaintStatus, ComplaintType
from scrs.repositories.audit_log_repository import AuditLogRepository
from scrs.repositories.complaint_repository import ComplaintRepository
from scrs.repositories.department_repository import DepartmentRepository
from scrs.repositories.status_history_repository import StatusHistoryRepository
from scrs.repositories.user_repository import UserRepository
from scrs.schemas.stats import (
    ActivityItem,
    AverageResolutionTime,
    ComplaintStatusCounts,
    MostActiveDepartment,
    RegistrationTrends,
    SatisfactionRate,
    SystemStats,
)

logger = logging.getLogger(__name__)


class StatsService:
    """Read-side aggregates, recomputed on every call."""

    def __init__(self, db: Session):
        self.db = db
        self.complaint_repo = ComplaintRepository()
        self.department_repo = DepartmentRepository()
        self.user_repo = UserRepository()
        self.history_repo = StatusHistoryRepository()
        self.audit_repo = AuditLogRepository()

    def get_status_counts(self) -> ComplaintStatusCounts:
        by_status = self.complaint_repo.count_grouped_by_status(self.db)
        by_type = self.complaint_repo.count_grouped_by_type(self.db)
        return ComplaintStatusCounts(
            total=sum(by_status.values()),
            pending=by_status.get(ComplaintStatus.NEW, 0),
            in_progress=by_status.get(ComplaintStatus.ASSIGNED, 0),
            resolved=by_status.get(ComplaintStatus.CLOSED, 0),
            confirmed_by_student=by_status.get(ComplaintStatus.CONFIRMED_BY_STUDENT, 0),
            by_status={s.value: by_status.get(s, 0) for s in ComplaintStatus},
            by_type={t.value: by_type.get(t, 0) for t in ComplaintType},
        )

    def get_system_stats(self) -> SystemStats:
        counts = self.get_status_counts()
        total_departments = self.department_repo.count(self.db)
        active_departments = self.department_repo.count_active(self.db)
        return SystemStats(
            total_users=self.user_repo.count(self.db),
            active_users=self.user_repo.count_active(self.db),
            total_complaints=counts.total,
            pending_complaints=counts.pending,
            in_progress_complaints=counts.in_progress,
            resolved_complaints=counts.resolved,
            confirmed_by_student_complaints=counts.confirmed_by_student,
            complaints_by_type=counts.by_type,
            total_departments=total_departments,
            active_departments=active_departments,
            inactive_departments=total_departments - active_departments,
        )

    def get_average_resolution_time(self) -> AverageResolutionTime:
        # updated_at stands in for the closing time
        closed = self.complaint_repo.get_by_status(self.db, ComplaintStatus.CLOSED)
        if not closed:
            return AverageResolutionTime(average_hours=0.0)
        total_hours = sum(
            (c.updated_at - c.created_at).total_seconds() / 3600.0 for c in closed
        )
        return AverageResolutionTime(average_hours=total_hours / len(closed))

    def get_most_active_department(self) -> MostActiveDepartment:
        best_name, best_count = "N/A", 0
        # Rows come ordered by department id, so a strict comparison keeps the lowest id on ties
        for _department_id, name, count in self.complaint_repo.count_grouped_by_department(self.db):
            if count > best_count:
                best_name, best_count = name, count
        return MostActiveDepartment(department_name=best_name, complaint_count=best_count)

    def get_satisfaction_rate(self) -> SatisfactionRate:
        total = self.complaint_repo.count(self.db)
        if total == 0:
            return SatisfactionRate(rate=0.0)
        closed = self.complaint_repo.count_by_status(self.db, ComplaintStatus.CLOSED)
        return SatisfactionRate(rate=closed * 100.0 / total)

    def get_recent_activity(self, limit: int = 10) -> List[ActivityItem]:
        items: List[ActivityItem] = []
        for entry in self.audit_repo.get_recent(self.db, limit):
            performer = entry.performer.username if entry.performer else "system"
            target = f"{entry.target_type} {entry.target_id}" if entry.target_type else ""
            items.append(ActivityItem(
                type=entry.action,
                description=f"{performer}: {entry.action} {target}".strip(),
                timestamp=entry.created_at,
            ))
        for entry in self.history_repo.get_recent(self.db, limit):
            items.append(ActivityItem(
                type="COMPLAINT_STATUS",
                description=f"Complaint {entry.complaint_id}: {entry.comment}",
                timestamp=entry.created_at,
            ))
        items.sort(key=lambda item: item.timestamp, reverse=True)
        return items[:limit]

    def get_registration_trends(self, days: int = 7) -> RegistrationTrends:
        today = datetime.utcnow().date()
        start_day = today - timedelta(days=days - 1)
        since = datetime.combine(start_day, datetime.min.time())

        per_day = {start_day + timedelta(days=i): 0 for i in range(days)}
        for user in self.user_repo.get_created_since(self.db, since):
            day = user.created_at.date()
            if day in per_day:
                per_day[day] += 1

        return RegistrationTrends(
            labels=[day.isoformat() for day in per_day],
            data=list(per_day.values()),
        )
