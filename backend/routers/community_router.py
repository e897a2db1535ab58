"""Community router: info, members and the join workflow."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from repositories.database import get_db
from services.community_service import CommunityService

router = APIRouter(prefix="/community", tags=["community"])


@router.get("/community-info", response_model=schemas.CommunityInfo)
def get_community_info(db: Session = Depends(get_db)) -> schemas.CommunityInfo:
    return schemas.CommunityInfo.model_validate(CommunityService.get_community(db))


@router.put("/community-info", response_model=schemas.CommunityInfo)
def update_community_info(
    data: schemas.CommunityUpdate,
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.CommunityInfo:
    """Update name and description. Community admin only."""
    community = CommunityService.update_community_info(db, current_user, data)
    return schemas.CommunityInfo.model_validate(community)


@router.get("/members-count", response_model=schemas.MembersCount)
def members_count(db: Session = Depends(get_db)) -> schemas.MembersCount:
    return schemas.MembersCount(count=CommunityService.members_count(db))


@router.get("/joined-members", response_model=List[schemas.Member])
def joined_members(db: Session = Depends(get_db)) -> List[schemas.Member]:
    """Members ordered by join date (newest first), then last and first name."""
    return [
        schemas.Member.model_validate(user)
        for user in CommunityService.joined_members(db)
    ]


@router.post("/join", response_model=schemas.SuccessResponse)
def request_join(
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.SuccessResponse:
    """Ask the community admin to let the caller join."""
    CommunityService.request_join(db, current_user.id)
    return schemas.SuccessResponse(message="Join request sent successfully")


@router.post("/approve-join", response_model=schemas.SuccessResponse)
def approve_join(
    data: schemas.ApproveJoinRequest,
    current_user: schemas.AuthenticatedUser = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
) -> schemas.SuccessResponse:
    """Grant membership directly. Community admin only."""
    CommunityService.approve_join(db, current_user, data.user_id)
    return schemas.SuccessResponse(message="User approved to join community")
