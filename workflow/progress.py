# Automatic campaign advances driven by engagement transitions

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from database.marketplace_models import Campaign, Engagement
from workflow.states import CampaignState, ContentState, NegotiationState, SelectionStatus

logger = logging.getLogger(__name__)


def is_engagement_finished(engagement: Engagement) -> bool:
    return (
        engagement.content_status == ContentState.LIVE
        or engagement.negotiation_status == NegotiationState.REJECTED
    )


def mark_in_production(db: Session, campaign_id: str) -> int:
    """Move a brief_published campaign to in_production. Does not commit."""
    count = db.query(Campaign).filter(
        Campaign.id == campaign_id,
        Campaign.state == CampaignState.BRIEF_PUBLISHED
    ).update({
        "state": CampaignState.IN_PRODUCTION,
        "production_started_at": datetime.utcnow(),
        "version": Campaign.version + 1,
    }, synchronize_session=False)
    if count:
        logger.info(f"Campaign {campaign_id} -> {CampaignState.IN_PRODUCTION.value}")
    return count


def maybe_complete_campaign(db: Session, campaign_id: str) -> int:
    """
    Complete an in_production campaign once every retained engagement is
    finished (live, or negotiation rejected). Commits when it advances.
    """
    retained = db.query(Engagement).filter(
        Engagement.campaign_id == campaign_id,
        Engagement.selection_status != SelectionStatus.REJECTED
    ).all()
    if not retained or not all(is_engagement_finished(e) for e in retained):
        return 0

    count = db.query(Campaign).filter(
        Campaign.id == campaign_id,
        Campaign.state == CampaignState.IN_PRODUCTION
    ).update({
        "state": CampaignState.COMPLETED,
        "completed_at": datetime.utcnow(),
        "version": Campaign.version + 1,
    }, synchronize_session=False)
    db.commit()
    if count:
        logger.info(f"Campaign {campaign_id} -> {CampaignState.COMPLETED.value}")
    return count
