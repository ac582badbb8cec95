"""
Script sub-machine: pending -> approved | rejected | revision_requested,
with rejected / revision_requested -> pending on resubmission.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from auth.lanes import ensure_creator_lane
from auth.roles import Permission
from database.marketplace_models import Engagement
from services.notification_service import NotificationType, notifications_after_commit
from workflow.errors import PreconditionFailed
from workflow.progress import mark_in_production
from workflow.review import BatchReviewResult, ReviewOutcome, ReviewTarget, review_batch, review_engagement
from workflow.states import (
    CREATORS_FINAL_STATES, NEGOTIATION_FINALIZED, SCRIPT_RESUBMITTABLE, SCRIPT_REVIEW_TRANSITIONS, SCRIPT_SUBMITTABLE,
    CampaignState, NegotiationState, ScriptState, parse_state,
)
from workflow.store import check_version, ensure_not_archived, ensure_selected, get_engagement, guarded_update
from workflow.validation import validate_text

logger = logging.getLogger(__name__)

SCRIPT = ReviewTarget(
    subject="script",
    state_enum=ScriptState,
    status_column="script_status",
    feedback_column="script_feedback",
    reviewed_at_column="script_reviewed_at",
    pending_state=ScriptState.PENDING,
    transitions=SCRIPT_REVIEW_TRANSITIONS,
    permission=Permission.REVIEW_SCRIPT,
)


def submit_script(db: Session, engagement_id: str, creator, content: str, expected_version: Optional[int] = None) -> Engagement:
    """
    Creator submits (or resubmits) a script.

    First submission needs a finalized deal on a campaign whose creators
    are final. Resubmitting after the brand
    rejected or asked for a revision does not re-check the money: the deal
    had to be final to get here.
    """
    engagement = get_engagement(db, engagement_id)
    ensure_creator_lane(creator, engagement, Permission.SUBMIT_SCRIPT)
    content = validate_text(content, "script content")
    check_version(engagement, expected_version)
    ensure_not_archived(engagement.campaign)
    ensure_selected(engagement)
    campaign_state = parse_state(CampaignState, engagement.campaign.state, "campaign state")
    if campaign_state not in CREATORS_FINAL_STATES:
        raise PreconditionFailed(f"creator selection not final (campaign is {campaign_state.value})")

    current = parse_state(ScriptState, engagement.script_status, "script state")
    if current not in SCRIPT_SUBMITTABLE:
        raise PreconditionFailed(f"script already {current.value}")
    if current not in SCRIPT_RESUBMITTABLE:
        negotiation = parse_state(NegotiationState, engagement.negotiation_status, "negotiation state")
        if negotiation not in NEGOTIATION_FINALIZED:
            raise PreconditionFailed(f"deal not finalized (negotiation is {negotiation.value})")

    guarded_update(db, Engagement, engagement, "script_status", [current], {
        "script_content": content,
        "script_status": ScriptState.PENDING,
        "script_submitted_at": datetime.utcnow(),
    })
    mark_in_production(db, engagement.campaign_id)
    db.commit()
    logger.info(f"Engagement {engagement.id}: script {current.value} -> pending")

    with notifications_after_commit(db) as notifications:
        notifications.notify_brand(
            engagement, NotificationType.SCRIPT_SUBMITTED,
            "Script submitted",
            f"{engagement.creator.display_name} submitted a script for '{engagement.campaign.name}'",
        )
    return engagement


def review_script(db: Session, engagement_id: str, actor, action, feedback: Optional[str] = None) -> ReviewOutcome:
    return review_engagement(db, SCRIPT, engagement_id, actor, action, feedback)


def review_scripts_batch(db: Session, campaign_id: str, actor, reviews: List[dict]) -> BatchReviewResult:
    return review_batch(db, SCRIPT, campaign_id, actor, reviews)
