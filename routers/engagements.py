"""
Engagements Router
Read-only views of one creator's participation in a campaign
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from database.config import get_db
from database.models import User
from auth.dependencies import get_current_user
from auth.decorators import require_user_type
from auth.roles import UserType
from auth.lanes import can_view_engagement
from workflow.campaign_state import list_creator_engagements
from workflow.errors import Forbidden
from workflow.store import get_engagement
from workflow.views import engagement_snapshot

router = APIRouter(prefix="/engagements", tags=["Engagements"])


@router.get("/mine", response_model=dict)
async def get_my_engagements(
    negotiation_status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_type(UserType.CREATOR))
):
    """All engagements of the current creator, newest first."""
    engagements = list_creator_engagements(db, current_user, negotiation_status)
    return {"engagements": [engagement_snapshot(e) for e in engagements], "total": len(engagements)}


@router.get("/{engagement_id}", response_model=dict)
async def get_engagement_detail(
    engagement_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    engagement = get_engagement(db, engagement_id)
    if not can_view_engagement(current_user, engagement):
        raise Forbidden("You cannot view this engagement")
    return engagement_snapshot(engagement)
