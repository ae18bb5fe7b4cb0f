from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from scrs.models.complaint import ComplaintStatus, ComplaintType


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class ComplaintCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    type: ComplaintType
    department_id: Optional[int] = None
    location: Optional[str] = Field(None, max_length=200)

    @field_validator('title', 'description', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


class ComplaintUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    type: Optional[ComplaintType] = None
    department_id: Optional[int] = None
    location: Optional[str] = Field(None, max_length=200)

    @field_validator('title', 'description', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


class ComplaintResponse(BaseModel):
    id: int
    title: str
    description: str
    type: ComplaintType
    status: ComplaintStatus
    location: Optional[str] = None
    created_by_id: int
    created_by_username: Optional[str] = None
    target_department_id: int
    department_name: Optional[str] = None
    assigned_to_id: Optional[int] = None
    assigned_to_username: Optional[str] = None
    total_votes: int
    student_confirmation: bool
    resolution_announced_at: Optional[datetime] = None
    confirmed_by_student_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StatusChangeRequest(BaseModel):
    status: ComplaintStatus
    notes: Optional[str] = Field(None, max_length=400)


class AssignRequest(BaseModel):
    staff_id: int


class CommentCreate(BaseModel):
    comment: str = Field(..., min_length=1, max_length=1000)
    is_internal: bool = False

    @field_validator('comment', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


class CommentResponse(BaseModel):
    id: int
    complaint_id: int
    user_id: int
    author_username: Optional[str] = None
    comment: str
    is_internal: bool
    created_at: datetime

    class Config:
        from_attributes = True


class StatusHistoryResponse(BaseModel):
    id: int
    complaint_id: int
    status: ComplaintStatus
    comment: Optional[str] = None
    changed_by_id: int
    changed_by_username: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class VoteResponse(BaseModel):
    complaint_id: int
    total_votes: int
    has_voted: bool
