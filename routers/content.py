"""
Content Router
Creator video uploads, brand content reviews and going live
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.config import get_db
from database.models import User
from auth.dependencies import get_current_user
from auth.decorators import require_permission
from auth.roles import Permission
from schemas.workflow import ContentUpload, GoLive, ReviewRequest, BatchReviewRequest
from routers.scripts import _batch_to_response
from workflow import content_review
from workflow.views import engagement_snapshot

router = APIRouter(prefix="/content", tags=["Content"])


@router.post("", response_model=dict)
async def upload_content(
    data: ContentUpload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Hand in the storage URI of the video. Needs an approved script."""
    engagement = content_review.upload_content(
        db, data.engagement_id, current_user, data.content_uri, data.live_uri, data.expected_version
    )
    return engagement_snapshot(engagement)


@router.post("/review", response_model=dict)
async def review_content(
    data: ReviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    outcome = content_review.review_content(db, data.engagement_id, current_user, data.action, data.feedback)
    response = engagement_snapshot(outcome.engagement)
    response["updated_count"] = outcome.updated_count
    return response


@router.post("/review/batch", response_model=dict)
async def review_content_batch(
    data: BatchReviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.REVIEW_CONTENT))
):
    result = content_review.review_content_batch(
        db, data.campaign_id, current_user, [r.dict() for r in data.reviews]
    )
    return _batch_to_response(data.campaign_id, result)


@router.post("/go-live", response_model=dict)
async def go_live(
    data: GoLive,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Publish approved content. Terminal for the engagement."""
    engagement = content_review.go_live(db, data.engagement_id, current_user, data.live_url, data.expected_version)
    return engagement_snapshot(engagement)
