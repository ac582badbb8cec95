# Store access for workflow transitions
# Lookups raise NotFound; transitions go through guarded_update, a single
# conditional UPDATE that only matches when the record is still in the state
# (and at the version) the caller read.

import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from database.marketplace_models import Campaign, Engagement
from workflow.errors import NotFound, PreconditionFailed, StaleState
from workflow.states import SelectionStatus

logger = logging.getLogger(__name__)


def get_campaign(db: Session, campaign_id: str) -> Campaign:
    campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
    if not campaign:
        raise NotFound(f"Campaign '{campaign_id}' not found")
    return campaign


def get_engagement(db: Session, engagement_id: str) -> Engagement:
    engagement = db.query(Engagement).filter(Engagement.id == engagement_id).first()
    if not engagement:
        raise NotFound(f"Engagement '{engagement_id}' not found")
    return engagement


def find_engagement(db: Session, campaign_id: str, creator_id: str) -> Engagement:
    engagement = db.query(Engagement).filter(
        Engagement.campaign_id == campaign_id,
        Engagement.creator_id == creator_id
    ).first()
    if not engagement:
        raise NotFound(f"Creator '{creator_id}' is not engaged on campaign '{campaign_id}'")
    return engagement


def check_version(record, expected_version: Optional[int]):
    """Reject a call made against an older snapshot than the one stored."""
    if expected_version is not None and record.version != expected_version:
        raise StaleState(
            f"{type(record).__name__} {record.id} is at version {record.version}, "
            f"caller acted on version {expected_version}"
        )


def ensure_not_archived(campaign: Campaign):
    if campaign.is_archived:
        raise PreconditionFailed("campaign is archived")


def ensure_selected(engagement: Engagement):
    """A creator the brand rejected keeps no lane on the campaign."""
    if engagement.selection_status == SelectionStatus.REJECTED:
        raise PreconditionFailed("creator was not selected for this campaign")


def guarded_update(
    db: Session,
    model,
    record,
    state_column: str,
    allowed_states: Iterable,
    values: dict,
    raise_on_stale: bool = True,
) -> int:
    """
    Apply `values` to `record` only if its state column is still one of
    `allowed_states` and its version is still the one we read.

    Returns the number of rows updated (0 or 1). With raise_on_stale, a lost
    race rolls back and raises StaleState instead of returning 0.
    """
    column = getattr(model, state_column)
    read_version = record.version
    count = db.query(model).filter(
        model.id == record.id,
        column.in_(list(allowed_states)),
        model.version == read_version
    ).update({**values, "version": model.version + 1}, synchronize_session=False)

    if count == 0:
        db.rollback()
        logger.warning(f"Stale {model.__tablename__} {record.id}: {state_column} moved away from the state read at version {read_version}")
        if raise_on_stale:
            raise StaleState(
                f"{model.__name__} {record.id} was changed by someone else; refresh and try again"
            )
    return count
