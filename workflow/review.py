"""
Brand-side review shared by the script and content sub-machines.

A review only applies to a `pending` submission. Anything else (already
reviewed, or a concurrent reviewer got there first) is a no-op that reports
zero records updated, so racing reviewers never error.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Type

from sqlalchemy.orm import Session

from auth.lanes import ensure_brand_lane
from auth.roles import Permission
from database.marketplace_models import Engagement
from services.notification_service import notifications_after_commit
from workflow.errors import NotFound, WorkflowError
from workflow.states import ReviewAction, parse_state
from workflow.store import ensure_not_archived, get_campaign, get_engagement, guarded_update
from workflow.validation import clean_optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewTarget:
    """Column layout of one reviewable sub-machine on Engagement."""
    subject: str
    state_enum: Type
    status_column: str
    feedback_column: str
    reviewed_at_column: str
    pending_state: object
    transitions: Dict[ReviewAction, object]
    permission: Permission


@dataclass
class ReviewOutcome:
    engagement: Engagement
    action: ReviewAction
    updated_count: int


@dataclass
class BatchReviewResult:
    approved_count: int = 0
    rejected_count: int = 0
    revision_requested_count: int = 0
    skipped_count: int = 0
    failures: List[dict] = field(default_factory=list)
    engagements: List[Engagement] = field(default_factory=list)

    @property
    def updated_count(self) -> int:
        return self.approved_count + self.rejected_count + self.revision_requested_count

    def record(self, outcome: ReviewOutcome):
        self.engagements.append(outcome.engagement)
        if not outcome.updated_count:
            self.skipped_count += 1
        elif outcome.action == ReviewAction.APPROVED:
            self.approved_count += 1
        elif outcome.action == ReviewAction.REJECTED:
            self.rejected_count += 1
        else:
            self.revision_requested_count += 1


def review_engagement(
    db: Session,
    target: ReviewTarget,
    engagement_id: str,
    actor,
    action,
    feedback: Optional[str] = None,
    campaign_id: Optional[str] = None,
) -> ReviewOutcome:
    action = parse_state(ReviewAction, action, "review action")
    engagement = get_engagement(db, engagement_id)
    if campaign_id and engagement.campaign_id != campaign_id:
        raise NotFound(f"Engagement '{engagement_id}' does not belong to campaign '{campaign_id}'")
    ensure_brand_lane(actor, engagement.campaign, target.permission)
    ensure_not_archived(engagement.campaign)

    current = parse_state(target.state_enum, getattr(engagement, target.status_column), f"{target.subject} state")
    if current != target.pending_state:
        logger.info(f"Engagement {engagement.id}: {target.subject} review ignored, state is {current.value}")
        return ReviewOutcome(engagement=engagement, action=action, updated_count=0)

    new_state = target.transitions[action]
    feedback = clean_optional(feedback)
    count = guarded_update(db, Engagement, engagement, target.status_column, [current], {
        target.status_column: new_state,
        target.feedback_column: feedback,
        target.reviewed_at_column: datetime.utcnow(),
    }, raise_on_stale=False)
    if not count:
        return ReviewOutcome(engagement=engagement, action=action, updated_count=0)

    db.commit()
    logger.info(f"Engagement {engagement.id}: {target.subject} {current.value} -> {new_state.value}")
    with notifications_after_commit(db) as notifications:
        notifications.notify_review_outcome(engagement, target.subject, action.value, feedback)
    return ReviewOutcome(engagement=engagement, action=action, updated_count=count)


def review_batch(db: Session, target: ReviewTarget, campaign_id: str, actor, reviews: List[dict]) -> BatchReviewResult:
    """
    Review many engagements of one campaign. Each item stands alone; a stale
    or invalid item is reported, never allowed to abort the rest.
    """
    campaign = get_campaign(db, campaign_id)
    ensure_brand_lane(actor, campaign, target.permission)

    result = BatchReviewResult()
    for item in reviews:
        engagement_id = item.get("engagement_id")
        try:
            outcome = review_engagement(
                db, target, engagement_id, actor,
                item.get("action"), item.get("feedback"),
                campaign_id=campaign_id,
            )
        except WorkflowError as e:
            db.rollback()
            result.failures.append({"engagement_id": engagement_id, "error": e.code, "message": e.message})
            continue
        result.record(outcome)

    logger.info(
        f"Campaign {campaign_id}: {target.subject} batch review "
        f"approved={result.approved_count} rejected={result.rejected_count} "
        f"revision_requested={result.revision_requested_count} skipped={result.skipped_count} "
        f"failed={len(result.failures)}"
    )
    return result
