"""
Content sub-machine: pending -> approved | rejected | revision_requested,
approved -> live (terminal). Content work starts only after the script is
approved.
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
from workflow.progress import maybe_complete_campaign
from workflow.review import BatchReviewResult, ReviewOutcome, ReviewTarget, review_batch, review_engagement
from workflow.states import (
    CONTENT_RESUBMITTABLE, CONTENT_REVIEW_TRANSITIONS, CONTENT_SUBMITTABLE,
    ContentState, ScriptState, parse_state,
)
from workflow.store import check_version, ensure_not_archived, ensure_selected, get_engagement, guarded_update
from workflow.validation import WEB_SCHEMES, validate_uri

logger = logging.getLogger(__name__)

CONTENT = ReviewTarget(
    subject="content",
    state_enum=ContentState,
    status_column="content_status",
    feedback_column="content_feedback",
    reviewed_at_column="content_reviewed_at",
    pending_state=ContentState.PENDING,
    transitions=CONTENT_REVIEW_TRANSITIONS,
    permission=Permission.REVIEW_CONTENT,
)


def upload_content(
    db: Session,
    engagement_id: str,
    creator,
    content_uri: str,
    live_uri: Optional[str] = None,
    expected_version: Optional[int] = None,
) -> Engagement:
    """Creator hands in the storage URI of their video for brand review."""
    engagement = get_engagement(db, engagement_id)
    ensure_creator_lane(creator, engagement, Permission.UPLOAD_CONTENT)
    content_uri = validate_uri(content_uri, "content_uri")
    if live_uri is not None:
        live_uri = validate_uri(live_uri, "live_uri", WEB_SCHEMES)
    check_version(engagement, expected_version)
    ensure_not_archived(engagement.campaign)
    ensure_selected(engagement)

    current = parse_state(ContentState, engagement.content_status, "content state")
    if current not in CONTENT_SUBMITTABLE:
        raise PreconditionFailed(f"content already {current.value}")
    if current not in CONTENT_RESUBMITTABLE:
        script = parse_state(ScriptState, engagement.script_status, "script state")
        if script != ScriptState.APPROVED:
            raise PreconditionFailed(f"script not yet approved (script is {script.value})")

    values = {
        "content_uri": content_uri,
        "content_status": ContentState.PENDING,
        "content_submitted_at": datetime.utcnow(),
    }
    if live_uri:
        values["live_uri"] = live_uri
    guarded_update(db, Engagement, engagement, "content_status", [current], values)
    db.commit()
    logger.info(f"Engagement {engagement.id}: content {current.value} -> pending")

    with notifications_after_commit(db) as notifications:
        notifications.notify_brand(
            engagement, NotificationType.CONTENT_SUBMITTED,
            "Content submitted",
            f"{engagement.creator.display_name} uploaded content for '{engagement.campaign.name}'",
        )
    return engagement


def review_content(db: Session, engagement_id: str, actor, action, feedback: Optional[str] = None) -> ReviewOutcome:
    return review_engagement(db, CONTENT, engagement_id, actor, action, feedback)


def review_content_batch(db: Session, campaign_id: str, actor, reviews: List[dict]) -> BatchReviewResult:
    return review_batch(db, CONTENT, campaign_id, actor, reviews)


def go_live(db: Session, engagement_id: str, creator, live_url: str, expected_version: Optional[int] = None) -> Engagement:
    """Creator publishes approved content. Terminal for the engagement."""
    engagement = get_engagement(db, engagement_id)
    ensure_creator_lane(creator, engagement, Permission.GO_LIVE)
    live_url = validate_uri(live_url, "live_url", WEB_SCHEMES)
    check_version(engagement, expected_version)
    ensure_not_archived(engagement.campaign)
    ensure_selected(engagement)

    current = parse_state(ContentState, engagement.content_status, "content state")
    if current != ContentState.APPROVED:
        raise PreconditionFailed(f"content not approved (content is {current.value})")

    guarded_update(db, Engagement, engagement, "content_status", [current], {
        "content_status": ContentState.LIVE,
        "live_uri": live_url,
        "went_live_at": datetime.utcnow(),
    })
    db.commit()
    logger.info(f"Engagement {engagement.id}: content approved -> live")

    with notifications_after_commit(db) as notifications:
        notifications.notify_brand(
            engagement, NotificationType.CONTENT_LIVE,
            "Content is live",
            f"{engagement.creator.display_name} published content for '{engagement.campaign.name}': {live_url}",
        )
    maybe_complete_campaign(db, engagement.campaign_id)
    return engagement
