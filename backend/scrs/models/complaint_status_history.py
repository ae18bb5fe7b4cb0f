from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from scrs.core.database import Base
from scrs.models.complaint import ComplaintStatus


class ComplaintStatusHistory(Base):
    """Append-only audit row; removed only together with its complaint"""

    __tablename__ = "complaint_status_history"

    id = Column(Integer, primary_key=True, index=True)
    complaint_id = Column(Integer, ForeignKey("complaints.id"), nullable=False, index=True)
    status = Column(Enum(ComplaintStatus, name="complaint_status", native_enum=False, length=30),
                    nullable=False)
    comment = Column(String(500), nullable=True)
    changed_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    complaint = relationship("Complaint", back_populates="status_history")
    changed_by = relationship("User")

    @property
    def changed_by_username(self):
        return self.changed_by.username if self.changed_by else None
