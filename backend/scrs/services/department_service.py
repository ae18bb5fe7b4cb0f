import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scrs.core.audit import AuditService
from scrs.core.config import settings
from scrs.core.exceptions import ConflictError, NotFoundError
from scrs.models.complaint import ComplaintType
from scrs.models.department import Department
from scrs.models.user import User
from scrs.repositories.department_repository import DepartmentRepository
from scrs.schemas.department import DepartmentCreate, DepartmentUpdate

logger = logging.getLogger(__name__)


class DepartmentService:
    def __init__(self, db: Session):
        self.db = db
        self.department_repo = DepartmentRepository()

    def get_department(self, department_id: int) -> Department:
        department = self.department_repo.get_by_id(self.db, department_id)
        if not department:
            raise NotFoundError(f"Department not found with id: {department_id}")
        return department

    def list_departments(self, active_only: bool = False) -> List[Department]:
        if active_only:
            return self.department_repo.get_active(self.db)
        return self.department_repo.get_all(self.db)

    def create_department(self, data: DepartmentCreate, performer: Optional[User] = None) -> Department:
        if self.department_repo.exists_by_name(self.db, data.name):
            raise ConflictError(f"Department already exists: {data.name}")

        now = datetime.utcnow()
        department = Department(
            name=data.name,
            description=data.description,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        try:
            self.department_repo.create(self.db, department)
            AuditService.log_action(
                self.db, "DEPARTMENT_CREATE", performer,
                target_id=department.id, target_type="DEPARTMENT", new_value=department.name,
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"Department already exists: {data.name}")
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(department)
        logger.info("[DEPARTMENT] Created department %s (id=%s)", department.name, department.id)
        return department

    def update_department(self, department_id: int, data: DepartmentUpdate, performer: Optional[User] = None) -> Department:
        department = self.get_department(department_id)
        old_name = department.name

        if data.name is not None and data.name != department.name:
            if self.department_repo.exists_by_name(self.db, data.name):
                raise ConflictError(f"Department already exists: {data.name}")
            department.name = data.name
        if data.description is not None:
            department.description = data.description
        department.updated_at = datetime.utcnow()

        try:
            AuditService.log_action(
                self.db, "DEPARTMENT_UPDATE", performer,
                target_id=department.id, target_type="DEPARTMENT",
                old_value=old_name, new_value=department.name,
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"Department already exists: {data.name}")
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(department)
        return department

    def set_active(self, department_id: int, is_active: bool, performer: Optional[User] = None) -> Department:
        department = self.get_department(department_id)
        old_value = str(department.is_active)
        department.is_active = is_active
        department.updated_at = datetime.utcnow()
        try:
            AuditService.log_action(
                self.db,
                "DEPARTMENT_ACTIVATE" if is_active else "DEPARTMENT_DEACTIVATE",
                performer,
                target_id=department.id, target_type="DEPARTMENT",
                old_value=old_value, new_value=str(is_active),
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(department)
        logger.info("[DEPARTMENT] %s is_active=%s", department.name, is_active)
        return department

    def delete_department(self, department_id: int, performer: Optional[User] = None) -> None:
        """
        Delete a department nothing points at any more.

        Departments that still own complaints or staff members are kept; deactivate
        them instead.
        """
        department = self.get_department(department_id)
        complaint_count = self.department_repo.count_complaints(self.db, department_id)
        if complaint_count:
            raise ConflictError(
                f"Department {department.name} has {complaint_count} complaint(s) and cannot be deleted; deactivate instead"
            )
        staff_count = self.department_repo.count_staff(self.db, department_id)
        if staff_count:
            raise ConflictError(
                f"Department {department.name} has {staff_count} staff member(s) and cannot be deleted"
            )

        name = department.name
        try:
            self.department_repo.delete(self.db, department)
            AuditService.log_action(
                self.db, "DEPARTMENT_DELETE", performer,
                target_id=department_id, target_type="DEPARTMENT", old_value=name,
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"Department {name} is still referenced and cannot be deleted")
        except Exception:
            self.db.rollback()
            raise
        logger.info("[DEPARTMENT] Deleted department %s (id=%s)", name, department_id)

    def resolve_target_department(self, complaint_type: ComplaintType) -> Department:
        """
        Pick a department for a complaint submitted without one.

        The first active department that already handles this complaint type wins
        (lowest id); otherwise the default department, created if missing. Runs
        inside the caller's transaction and does not commit.
        """
        candidates = self.department_repo.find_by_complaint_type(self.db, complaint_type)
        if candidates:
            return candidates[0]
        return self.get_or_create_default()

    def get_or_create_default(self) -> Department:
        name = settings.DEFAULT_DEPARTMENT_NAME
        department = self.department_repo.get_by_name(self.db, name)
        if department:
            return department
        now = datetime.utcnow()
        department = Department(
            name=name,
            description="Default department for unrouted complaints",
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        logger.info("[DEPARTMENT] Creating default department %r", name)
        return self.department_repo.create(self.db, department)
