from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from scrs.core.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String, nullable=False, index=True)  # e.g., "USER_UPDATE", "USER_STATUS_CHANGE"
    performer_id = Column(Integer, ForeignKey("users.id"), nullable=True)  # User who performed the action
    target_id = Column(String, nullable=True)  # ID of the object being acted upon
    target_type = Column(String, nullable=True)  # "USER", "DEPARTMENT"
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    details = Column(Text, nullable=True)  # JSON or text description
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    performer = relationship("User", foreign_keys=[performer_id])
