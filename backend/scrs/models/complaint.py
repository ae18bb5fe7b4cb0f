import enum
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from scrs.core.database import Base


class ComplaintType(str, enum.Enum):
    ACADEMIC = "ACADEMIC"
    FACILITY = "FACILITY"


class ComplaintStatus(str, enum.Enum):
    NEW = "NEW"                                    # just submitted
    ASSIGNED = "ASSIGNED"                          # assigned to a staff member
    IN_PROGRESS = "IN_PROGRESS"                    # work is being done
    RESOLUTION_ANNOUNCED = "RESOLUTION_ANNOUNCED"  # staff announced a resolution
    CONFIRMED_BY_STUDENT = "CONFIRMED_BY_STUDENT"  # student confirmed satisfaction
    CLOSED = "CLOSED"                              # fully resolved


class Complaint(Base):
    __tablename__ = "complaints"
    __table_args__ = (
        CheckConstraint("total_votes >= 0", name="ck_complaints_total_votes_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(String(2000), nullable=False)
    type = Column(Enum(ComplaintType, name="complaint_type", native_enum=False, length=20),
                  nullable=False, index=True)
    status = Column(Enum(ComplaintStatus, name="complaint_status", native_enum=False, length=30),
                    default=ComplaintStatus.NEW, nullable=False, index=True)
    location = Column(String(200), nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    target_department_id = Column(Integer, ForeignKey("departments.id"), nullable=False, index=True)
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    total_votes = Column(Integer, default=0, nullable=False)  # cached count of complaint_votes rows
    student_confirmation = Column(Boolean, default=False, nullable=False)
    resolution_announced_at = Column(DateTime, nullable=True)
    confirmed_by_student_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    created_by = relationship("User", foreign_keys=[created_by_id])
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])
    target_department = relationship("Department", back_populates="complaints")

    status_history = relationship(
        "ComplaintStatusHistory",
        back_populates="complaint",
        order_by="ComplaintStatusHistory.id",
    )
    votes = relationship("ComplaintVote", back_populates="complaint")
    comments = relationship(
        "ComplaintComment",
        back_populates="complaint",
        order_by="ComplaintComment.id",
    )

    def __repr__(self):
        return (
            f"<Complaint id={self.id} title={self.title!r} type={self.type} "
            f"status={self.status} total_votes={self.total_votes}>"
        )

    @property
    def created_by_username(self):
        return self.created_by.username if self.created_by else None

    @property
    def assigned_to_username(self):
        return self.assigned_to.username if self.assigned_to else None

    @property
    def department_name(self):
        return self.target_department.name if self.target_department else None
