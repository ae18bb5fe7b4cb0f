from scrs.models.user import User, UserRole
from scrs.models.department import Department
from scrs.models.complaint import Complaint, ComplaintStatus, ComplaintType
from scrs.models.complaint_vote import ComplaintVote
from scrs.models.complaint_status_history import ComplaintStatusHistory
from scrs.models.complaint_comment import ComplaintComment
from scrs.models.audit_log import AuditLog

__all__ = [
    "User", "UserRole", "Department",
    "Complaint", "ComplaintStatus", "ComplaintType",
    "ComplaintVote", "ComplaintStatusHistory", "ComplaintComment",
    "AuditLog",
]
