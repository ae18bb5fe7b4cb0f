from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from scrs.core.database import Base


class ComplaintVote(Base):
    __tablename__ = "complaint_votes"
    __table_args__ = (
        UniqueConstraint("complaint_id", "user_id", name="uq_complaint_votes_complaint_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    complaint_id = Column(Integer, ForeignKey("complaints.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    complaint = relationship("Complaint", back_populates="votes")
    user = relationship("User")
