"""
Scripts Router
Creator script submissions and brand script reviews
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.config import get_db
from database.models import User
from auth.dependencies import get_current_user
from auth.decorators import require_permission
from auth.roles import Permission
from schemas.workflow import ScriptSubmit, ReviewRequest, BatchReviewRequest
from workflow import script_review
from workflow.review import BatchReviewResult
from workflow.views import engagement_snapshot

router = APIRouter(prefix="/script", tags=["Scripts"])


def _batch_to_response(campaign_id: str, result: BatchReviewResult) -> dict:
    return {
        "campaign_id": campaign_id,
        "updated_count": result.updated_count,
        "approved_count": result.approved_count,
        "rejected_count": result.rejected_count,
        "revision_requested_count": result.revision_requested_count,
        "skipped_count": result.skipped_count,
        "failures": result.failures,
        "engagements": [engagement_snapshot(e) for e in result.engagements],
    }


@router.post("", response_model=dict)
async def submit_script(
    data: ScriptSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Submit or resubmit the script for brand review."""
    engagement = script_review.submit_script(db, data.engagement_id, current_user, data.content, data.expected_version)
    return engagement_snapshot(engagement)


@router.post("/review", response_model=dict)
async def review_script(
    data: ReviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Approve, reject or request a revision. No-op unless the script is pending."""
    outcome = script_review.review_script(db, data.engagement_id, current_user, data.action, data.feedback)
    response = engagement_snapshot(outcome.engagement)
    response["updated_count"] = outcome.updated_count
    return response


@router.post("/review/batch", response_model=dict)
async def review_scripts_batch(
    data: BatchReviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.REVIEW_SCRIPT))
):
    result = script_review.review_scripts_batch(
        db, data.campaign_id, current_user, [r.dict() for r in data.reviews]
    )
    return _batch_to_response(data.campaign_id, result)
