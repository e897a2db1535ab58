"""Notification router endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from repositories.database import get_db
from services.community_service import CommunityService
from services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[schemas.Notification])
def list_notifications(
    user_id: Optional[int] = Query(None, alias="userId"),
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> List[schemas.Notification]:
    """List the caller's notifications, newest first."""
    receiver_id = user_id if user_id is not None else current_user.id
    return [
        schemas.Notification.model_validate(n)
        for n in NotificationService.list_notifications(db, current_user, receiver_id)
    ]


@router.get("/unread-count", response_model=schemas.UnreadCount)
def unread_count(
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.UnreadCount:
    return schemas.UnreadCount(
        count=NotificationService.unread_count(db, current_user)
    )


@router.post("/mark-read", response_model=schemas.MarkReadResponse)
def mark_read(
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.MarkReadResponse:
    return schemas.MarkReadResponse(
        updated=NotificationService.mark_all_read(db, current_user)
    )


@router.post("/process-join", response_model=schemas.SuccessResponse)
def process_join(
    data: schemas.ProcessJoinRequest,
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.SuccessResponse:
    """Approve or decline a join request notification. Community admin only."""
    CommunityService.process_join_request(
        db, current_user, data.notification_id, data.user_id, data.approve
    )
    message = (
        "User approved to join community" if data.approve else "Join request rejected"
    )
    return schemas.SuccessResponse(message=message)
