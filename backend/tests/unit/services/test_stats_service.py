from datetime import datetime, timedelta

import pytest
from scrs.core.audit import AuditService
from scrs.models.complaint import Complaint, ComplaintStatus, ComplaintType
from scrs.models.user import UserRole
from scrs.services.complaint_service import ComplaintService
from scrs.services.stats_service import StatsService


@pytest.fixture
def add_complaint(db, make_user):
    author = make_user()

    def _add(department, status=ComplaintStatus.NEW, complaint_type=ComplaintType.FACILITY,
             created_at=None, updated_at=None):
        created_at = created_at or datetime.utcnow()
        complaint = Complaint(
            title="Complaint",
            description="Details",
            type=complaint_type,
            status=status,
            created_by_id=author.id,
            target_department_id=department.id,
            created_at=created_at,
            updated_at=updated_at or created_at,
        )
        db.add(complaint)
        db.commit()
        return complaint

    return _add


class TestStatsService:
    def test_empty_system(self, db):
        service = StatsService(db)
        counts = service.get_status_counts()
        assert counts.total == 0
        assert counts.pending == 0
        assert counts.by_status["CLOSED"] == 0
        assert service.get_satisfaction_rate().rate == 0.0
        assert service.get_average_resolution_time().average_hours == 0.0
        most_active = service.get_most_active_department()
        assert most_active.department_name == "N/A"
        assert most_active.complaint_count == 0

    def test_status_counts(self, db, make_department, add_complaint):
        department = make_department("Facilities")
        add_complaint(department, ComplaintStatus.NEW)
        add_complaint(department, ComplaintStatus.NEW, ComplaintType.ACADEMIC)
        add_complaint(department, ComplaintStatus.ASSIGNED)
        add_complaint(department, ComplaintStatus.IN_PROGRESS)
        add_complaint(department, ComplaintStatus.CONFIRMED_BY_STUDENT)
        add_complaint(department, ComplaintStatus.CLOSED)

        counts = StatsService(db).get_status_counts()

        assert counts.total == 6
        assert counts.pending == 2
        assert counts.in_progress == 1
        assert counts.resolved == 1
        assert counts.confirmed_by_student == 1
        assert counts.by_status["IN_PROGRESS"] == 1
        assert counts.by_status["RESOLUTION_ANNOUNCED"] == 0
        assert counts.by_type == {"ACADEMIC": 1, "FACILITY": 5}

    def test_satisfaction_rate(self, db, make_department, add_complaint):
        department = make_department("Facilities")
        add_complaint(department, ComplaintStatus.NEW)
        add_complaint(department, ComplaintStatus.IN_PROGRESS)
        add_complaint(department, ComplaintStatus.CLOSED)

        assert StatsService(db).get_satisfaction_rate().rate == pytest.approx(33.33, abs=0.01)

    def test_average_resolution_time(self, db, make_department, add_complaint):
        department = make_department("Facilities")
        start = datetime(2024, 3, 1, 9, 0, 0)
        add_complaint(department, ComplaintStatus.CLOSED, created_at=start, updated_at=start + timedelta(hours=5))
        # Open complaints do not count
        add_complaint(department, ComplaintStatus.IN_PROGRESS, created_at=start, updated_at=start + timedelta(hours=50))

        assert StatsService(db).get_average_resolution_time().average_hours == pytest.approx(5.0)

    def test_average_resolution_time_keeps_fractions(self, db, make_department, add_complaint):
        department = make_department("Facilities")
        start = datetime(2024, 3, 1, 9, 0, 0)
        add_complaint(department, ComplaintStatus.CLOSED, created_at=start, updated_at=start + timedelta(hours=2))
        add_complaint(department, ComplaintStatus.CLOSED, created_at=start, updated_at=start + timedelta(hours=3))

        assert StatsService(db).get_average_resolution_time().average_hours == pytest.approx(2.5)

    def test_most_active_department(self, db, make_department, add_complaint):
        facilities = make_department("Facilities")
        academics = make_department("Academics")
        add_complaint(facilities)
        add_complaint(academics)
        add_complaint(academics, ComplaintStatus.CLOSED)

        most_active = StatsService(db).get_most_active_department()
        assert most_active.department_name == "Academics"
        assert most_active.complaint_count == 2

    def test_most_active_department_tie_goes_to_lowest_id(self, db, make_department, add_complaint):
        facilities = make_department("Facilities")
        academics = make_department("Academics")
        add_complaint(academics)
        add_complaint(facilities)

        assert StatsService(db).get_most_active_department().department_name == "Facilities"

    def test_system_stats(self, db, make_user, make_department, add_complaint):
        make_user(role=UserRole.STAFF, is_active=False)
        add_complaint(make_department("Facilities"))

        stats = StatsService(db).get_system_stats()
        # The complaint author plus the inactive staff member
        assert stats.total_users == 2
        assert stats.active_users == 1
        assert stats.total_complaints == 1
        assert stats.pending_complaints == 1
        assert stats.total_departments == 1
        assert stats.active_departments == 1
        assert stats.inactive_departments == 0

    def test_recent_activity_merges_sources(self, db, make_user, make_department, add_complaint):
        admin = make_user(role=UserRole.ADMIN)
        department = make_department("Facilities")
        AuditService.log_action(db, "DEPARTMENT_CREATE", admin, target_id=department.id, target_type="DEPARTMENT")
        db.commit()
        complaint = add_complaint(department)
        ComplaintService(db).change_status(complaint.id, ComplaintStatus.CLOSED, admin.id, "Fixed")

        activity = StatsService(db).get_recent_activity(limit=10)

        types = [item.type for item in activity]
        assert "DEPARTMENT_CREATE" in types
        assert "COMPLAINT_STATUS" in types
        timestamps = [item.timestamp for item in activity]
        assert timestamps == sorted(timestamps, reverse=True)
        assert StatsService(db).get_recent_activity(limit=1)[0].type == "COMPLAINT_STATUS"

    def test_registration_trends(self, db, make_user):
        today_user = make_user()
        old_user = make_user()
        old_user.created_at = datetime.utcnow() - timedelta(days=30)
        two_days_ago = make_user()
        two_days_ago.created_at = datetime.utcnow() - timedelta(days=2)
        db.commit()

        trends = StatsService(db).get_registration_trends()

        assert len(trends.labels) == 7
        assert trends.labels[-1] == today_user.created_at.date().isoformat()
        assert trends.data[-1] == 1
        assert trends.data[-3] == 1
        assert sum(trends.data) == 2
