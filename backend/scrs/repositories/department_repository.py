from sqlalchemy.orm import Session
from scrs.models.department import Department
from scrs.models.complaint import Complaint, ComplaintType
from scrs.models.user import User
from typing import Optional, List

class DepartmentRepository:
    def get_by_id(self, db: Session, department_id: int) -> Optional[Department]:
        return db.query(Department).filter(Department.id == department_id).first()

    def get_by_name(self, db: Session, name: str) -> Optional[Department]:
        return db.query(Department).filter(Department.name == name).first()

    def exists_by_name(self, db: Session, name: str) -> bool:
        return self.get_by_name(db, name) is not None

    def create(self, db: Session, department: Department) -> Department:
        db.add(department)
        db.flush()
        return department

    def get_all(self, db: Session) -> List[Department]:
        return db.query(Department).order_by(Department.id).all()

    def get_active(self, db: Session) -> List[Department]:
        return db.query(Department).filter(Department.is_active.is_(True)).order_by(Department.id).all()

    def find_by_complaint_type(self, db: Session, complaint_type: ComplaintType) -> List[Department]:
        """Active departments that have received at least one complaint of this type, lowest id first"""
        return (
            db.query(Department)
            .join(Complaint, Complaint.target_department_id == Department.id)
            .filter(Complaint.type == complaint_type, Department.is_active.is_(True))
            .distinct()
            .order_by(Department.id)
            .all()
        )

    def delete(self, db: Session, department: Department) -> None:
        db.delete(department)
        db.flush()

    def count(self, db: Session) -> int:
        return db.query(Department).count()

    def count_active(self, db: Session) -> int:
        return db.query(Department).filter(Department.is_active.is_(True)).count()

    def count_complaints(self, db: Session, department_id: int) -> int:
        return db.query(Complaint).filter(Complaint.target_department_id == department_id).count()

    def count_staff(self, db: Session, department_id: int) -> int:
        return db.query(User).filter(User.department_id == department_id).count()
