from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from scrs.core.database import get_db
from scrs.core.permissions import (
    get_admin_user,
    get_current_user,
    get_staff_or_admin,
    get_student_user,
)
from scrs.models.complaint import ComplaintStatus, ComplaintType
from scrs.models.user import User, UserRole
from scrs.schemas.complaint import (
    AssignRequest,
    CommentCreate,
    CommentResponse,
    ComplaintCreate,
    ComplaintResponse,
    ComplaintUpdate,
    StatusChangeRequest,
    StatusHistoryResponse,
    VoteResponse,
)
from scrs.services.complaint_service import ComplaintService
from scrs.services.vote_service import VoteService

router = APIRouter()


@router.get("/top-voted", response_model=List[ComplaintResponse])
def get_top_voted(
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Public: the most supported complaints"""
    return ComplaintService(db).get_top_voted(limit)


@router.get("/requiring-confirmation", response_model=List[ComplaintResponse])
def get_requiring_confirmation(
    current_user: User = Depends(get_staff_or_admin),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).get_requiring_confirmation()


@router.get("", response_model=List[ComplaintResponse])
def list_complaints(
    status_filter: Optional[ComplaintStatus] = Query(None, alias="status"),
    complaint_type: Optional[ComplaintType] = Query(None, alias="type"),
    created_by_id: Optional[int] = None,
    assigned_to_id: Optional[int] = None,
    department_id: Optional[int] = None,
    created_from: Optional[datetime] = None,
    created_to: Optional[datetime] = None,
    mine: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if mine:
        if current_user.role == UserRole.STAFF:
            assigned_to_id = current_user.id
        else:
            created_by_id = current_user.id
    return ComplaintService(db).list_complaints(
        status=status_filter,
        complaint_type=complaint_type,
        created_by_id=created_by_id,
        assigned_to_id=assigned_to_id,
        department_id=department_id,
        created_from=created_from,
        created_to=created_to,
        skip=skip,
        limit=limit,
    )


@router.post("", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
def create_complaint(
    data: ComplaintCreate,
    current_user: User = Depends(get_student_user),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).create_complaint(data, current_user.id)


@router.get("/{complaint_id}", response_model=ComplaintResponse)
def get_complaint(
    complaint_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).get_complaint(complaint_id)


@router.put("/{complaint_id}", response_model=ComplaintResponse)
def update_complaint(
    complaint_id: int,
    data: ComplaintUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).update_complaint(complaint_id, data, current_user)


@router.delete("/{complaint_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_complaint(
    complaint_id: int,
    current_user: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    ComplaintService(db).delete_complaint(complaint_id)


@router.post("/{complaint_id}/vote", response_model=VoteResponse)
def vote(
    complaint_id: int,
    current_user: User = Depends(get_student_user),
    db: Session = Depends(get_db)
):
    complaint = VoteService(db).vote(complaint_id, current_user.id)
    return VoteResponse(complaint_id=complaint.id, total_votes=complaint.total_votes, has_voted=True)


@router.delete("/{complaint_id}/vote", response_model=VoteResponse)
def unvote(
    complaint_id: int,
    current_user: User = Depends(get_student_user),
    db: Session = Depends(get_db)
):
    complaint = VoteService(db).unvote(complaint_id, current_user.id)
    return VoteResponse(complaint_id=complaint.id, total_votes=complaint.total_votes, has_voted=False)


@router.get("/{complaint_id}/vote", response_model=VoteResponse)
def get_vote(
    complaint_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = VoteService(db)
    return VoteResponse(
        complaint_id=complaint_id,
        total_votes=service.vote_count(complaint_id),
        has_voted=service.has_voted(complaint_id, current_user.id),
    )


@router.put("/{complaint_id}/status", response_model=ComplaintResponse)
def change_status(
    complaint_id: int,
    data: StatusChangeRequest,
    current_user: User = Depends(get_staff_or_admin),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).change_status(complaint_id, data.status, current_user.id, data.notes)


@router.put("/{complaint_id}/assign", response_model=ComplaintResponse)
def assign_complaint(
    complaint_id: int,
    data: AssignRequest,
    current_user: User = Depends(get_staff_or_admin),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).assign(complaint_id, data.staff_id, current_user.id)


@router.post("/{complaint_id}/confirm", response_model=ComplaintResponse)
def confirm_resolution(
    complaint_id: int,
    current_user: User = Depends(get_student_user),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).confirm_resolution(complaint_id, current_user.id)


@router.get("/{complaint_id}/comments", response_model=List[CommentResponse])
def list_comments(
    complaint_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).list_comments(complaint_id, current_user)


@router.post("/{complaint_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def add_comment(
    complaint_id: int,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).add_comment(complaint_id, current_user.id, data.comment, data.is_internal)


@router.get("/{complaint_id}/history", response_model=List[StatusHistoryResponse])
def get_history(
    complaint_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).get_history(complaint_id)
