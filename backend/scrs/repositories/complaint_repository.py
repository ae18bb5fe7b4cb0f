from sqlalchemy import case, func
from sqlalchemy.orm import Session
from scrs.models.complaint import Complaint, ComplaintStatus, ComplaintType
from scrs.models.department import Department
from datetime import datetime
from typing import Optional, List, Dict, Tuple

class ComplaintRepository:
    def get_by_id(self, db: Session, complaint_id: int) -> Optional[Complaint]:
        return db.query(Complaint).filter(Complaint.id == complaint_id).first()

    def exists(self, db: Session, complaint_id: int) -> bool:
        return db.query(Complaint.id).filter(Complaint.id == complaint_id).first() is not None

    def create(self, db: Session, complaint: Complaint) -> Complaint:
        db.add(complaint)
        db.flush()
        return complaint

    def save(self, db: Session, complaint: Complaint) -> Complaint:
        db.add(complaint)
        db.flush()
        return complaint

    def delete_by_id(self, db: Session, complaint_id: int) -> int:
        return db.query(Complaint).filter(Complaint.id == complaint_id).delete(synchronize_session=False)

    def decrement_votes(self, db: Session, complaint_id: int) -> int:
        """Lower total_votes by one in SQL, never below zero"""
        return (
            db.query(Complaint)
            .filter(Complaint.id == complaint_id)
            .update(
                {Complaint.total_votes: case((Complaint.total_votes > 0, Complaint.total_votes - 1), else_=0)},
                synchronize_session=False,
            )
        )

    def search(
        self,
        db: Session,
        status: Optional[ComplaintStatus] = None,
        complaint_type: Optional[ComplaintType] = None,
        created_by_id: Optional[int] = None,
        assigned_to_id: Optional[int] = None,
        department_id: Optional[int] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Complaint]:
        query = db.query(Complaint)
        if status is not None:
            query = query.filter(Complaint.status == status)
        if complaint_type is not None:
            query = query.filter(Complaint.type == complaint_type)
        if created_by_id is not None:
            query = query.filter(Complaint.created_by_id == created_by_id)
        if assigned_to_id is not None:
            query = query.filter(Complaint.assigned_to_id == assigned_to_id)
        if department_id is not None:
            query = query.filter(Complaint.target_department_id == department_id)
        if created_from is not None:
            query = query.filter(Complaint.created_at >= created_from)
        if created_to is not None:
            query = query.filter(Complaint.created_at <= created_to)
        return query.order_by(Complaint.created_at.desc(), Complaint.id.desc()).offset(skip).limit(limit).all()

    def get_top_voted(self, db: Session, limit: int = 10) -> List[Complaint]:
        return (
            db.query(Complaint)
            .filter(Complaint.total_votes > 0)
            .order_by(Complaint.total_votes.desc(), Complaint.created_at.desc())
            .limit(limit)
            .all()
        )

    def get_requiring_confirmation(self, db: Session) -> List[Complaint]:
        return (
            db.query(Complaint)
            .filter(
                Complaint.status == ComplaintStatus.RESOLUTION_ANNOUNCED,
                Complaint.student_confirmation.is_(False),
            )
            .order_by(Complaint.id)
            .all()
        )

    def get_by_status(self, db: Session, status: ComplaintStatus) -> List[Complaint]:
        return db.query(Complaint).filter(Complaint.status == status).order_by(Complaint.id).all()

    def count(self, db: Session) -> int:
        return db.query(Complaint).count()

    def count_by_status(self, db: Session, status: ComplaintStatus) -> int:
        return db.query(Complaint).filter(Complaint.status == status).count()

    def count_grouped_by_status(self, db: Session) -> Dict[ComplaintStatus, int]:
        rows = db.query(Complaint.status, func.count(Complaint.id)).group_by(Complaint.status).all()
        return {status: count for status, count in rows}

    def count_grouped_by_type(self, db: Session) -> Dict[ComplaintType, int]:
        rows = db.query(Complaint.type, func.count(Complaint.id)).group_by(Complaint.type).all()
        return {complaint_type: count for complaint_type, count in rows}

    def count_grouped_by_department(self, db: Session) -> List[Tuple[int, str, int]]:
        """(department id, name, complaint count) for every department with complaints, by id"""
        return (
            db.query(Department.id, Department.name, func.count(Complaint.id))
            .join(Complaint, Complaint.target_department_id == Department.id)
            .group_by(Department.id, Department.name)
            .order_by(Department.id)
            .all()
        )
