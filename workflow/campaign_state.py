"""
Campaign aggregate state.

sourcing -> creators_shortlisted -> creators_are_final -> brief_published
-> in_production -> completed. `awaiting_brief` is a view over
creators_are_final without a brief and is never stored.

The selection commit is two-step (finalize amounts, then submit the
selection) and both steps are idempotent once the creators are final.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from auth.lanes import ensure_admin, ensure_brand_lane, ensure_permission, can_view_campaign, get_user_type
from auth.roles import Permission, UserType
from database.models import User, UserTypeDB
from database.marketplace_models import Campaign, Engagement, NegotiationEvent
from services.notification_service import notifications_after_commit
from workflow import negotiation
from workflow.errors import Forbidden, NotFound, PreconditionFailed, StaleState, ValidationError
from workflow.progress import maybe_complete_campaign
from workflow.states import (
    CREATORS_FINAL_STATES, NEGOTIATION_FINALIZED,
    CampaignState, NegotiationAction, NegotiationState, ScriptState, SelectionStatus, parse_state,
)
from workflow.store import check_version, ensure_not_archived, find_engagement, get_campaign, guarded_update
from workflow.validation import clean_optional, validate_text, validate_uri

logger = logging.getLogger(__name__)

BRIEF_FIELDS = ("video_title", "primary_focus", "secondary_focus", "dos", "donts", "cta", "sample_video_uri", "script_template")
REQUIRED_BRIEF_FIELDS = ("video_title", "primary_focus")

FINALIZE_DECISIONS = {
    "accept_counter": (NegotiationAction.ACCEPT_BID, negotiation.accept_bid),
    "reject_counter": (NegotiationAction.REJECT_BID, negotiation.reject_bid),
}


@dataclass
class CampaignOutcome:
    campaign: Campaign
    updated_count: int
    off_target_creator_ids: Optional[List[str]] = None


# ============================================================================
# CREATION / ARCHIVE
# ============================================================================

def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def create_campaign(db: Session, actor, fields: dict) -> Campaign:
    """Brand owner opens a campaign in `sourcing`."""
    user_type = ensure_permission(actor, Permission.CREATE_CAMPAIGN)
    brand_id = actor.brand_id
    if user_type == UserType.ADMIN:
        brand_id = fields.get("brand_id") or brand_id
    if not brand_id:
        raise ValidationError("brand_id is required")

    campaign = Campaign(
        brand_id=brand_id,
        created_by=actor.id,
        name=validate_text(fields.get("name"), "name"),
        description=clean_optional(fields.get("description")),
        budget=fields.get("budget") or 0,
        cost_per_view=fields.get("cost_per_view") or 0,
        target_categories=fields.get("target_categories") or [],
        min_followers=fields.get("min_followers"),
        max_followers=fields.get("max_followers"),
        creator_count=fields.get("creator_count"),
        go_live_date=_naive_utc(fields.get("go_live_date")),
        negotiation_deadline=_naive_utc(fields.get("negotiation_deadline")),
        negotiation_rounds=fields.get("negotiation_rounds"),
        state=CampaignState.SOURCING,
    )
    ensure_brand_lane(actor, campaign, Permission.CREATE_CAMPAIGN)
    if campaign.budget < 0 or campaign.cost_per_view < 0:
        raise ValidationError("budget and cost_per_view cannot be negative")
    if campaign.min_followers is not None and campaign.max_followers is not None \
            and campaign.min_followers > campaign.max_followers:
        raise ValidationError("min_followers cannot exceed max_followers")

    db.add(campaign)
    db.commit()
    db.refresh(campaign)
    logger.info(f"Campaign {campaign.id} created for brand {brand_id}")
    return campaign


def archive_campaign(db: Session, campaign_id: str, actor) -> CampaignOutcome:
    campaign = get_campaign(db, campaign_id)
    ensure_brand_lane(actor, campaign, Permission.ARCHIVE_CAMPAIGN)
    if campaign.is_archived:
        return CampaignOutcome(campaign, 0)

    guarded_update(db, Campaign, campaign, "state", [campaign.state], {"archived_at": datetime.utcnow()})
    db.commit()
    logger.info(f"Campaign {campaign.id} archived")
    return CampaignOutcome(campaign, 1)


# ============================================================================
# SHORTLIST
# ============================================================================

def off_target_creators(campaign: Campaign, creators: List[User]) -> List[str]:
    """Creators whose category or follower count falls outside the campaign targets."""
    categories = {c.lower() for c in (campaign.target_categories or [])}
    off = []
    for creator in creators:
        profile = creator.creator_profile
        if profile is None:
            off.append(creator.id)
            continue
        if categories and (profile.category or "").lower() not in categories:
            off.append(creator.id)
        elif campaign.min_followers is not None and (profile.followers or 0) < campaign.min_followers:
            off.append(creator.id)
        elif campaign.max_followers is not None and (profile.followers or 0) > campaign.max_followers:
            off.append(creator.id)
    return off


def upload_creator_shortlist(
    db: Session,
    campaign_id: str,
    actor,
    creator_ids: List[str],
    expected_version: Optional[int] = None,
) -> CampaignOutcome:
    """Admin attaches candidate creators; one engagement each, in negotiation.none."""
    campaign = get_campaign(db, campaign_id)
    ensure_admin(actor, Permission.UPLOAD_SHORTLIST)
    ensure_not_archived(campaign)

    ids = list(dict.fromkeys(i for i in creator_ids if i))
    if not ids:
        raise ValidationError("creator shortlist is empty")
    creators = db.query(User).filter(User.id.in_(ids), User.user_type == UserTypeDB.CREATOR).all()
    missing = set(ids) - {c.id for c in creators}
    if missing:
        raise NotFound(f"Creators not found: {', '.join(sorted(missing))}")

    check_version(campaign, expected_version)
    state = parse_state(CampaignState, campaign.state, "campaign state")
    if state != CampaignState.SOURCING:
        raise PreconditionFailed(f"shortlist already uploaded (campaign is {state.value})")

    guarded_update(db, Campaign, campaign, "state", [CampaignState.SOURCING], {
        "state": CampaignState.CREATORS_SHORTLISTED,
        "shortlisted_at": datetime.utcnow(),
    })
    for creator_id in ids:
        db.add(Engagement(campaign_id=campaign.id, creator_id=creator_id))
    db.commit()

    off_target = off_target_creators(campaign, creators)
    if off_target:
        logger.warning(f"Campaign {campaign.id}: {len(off_target)} shortlisted creator(s) outside targets")
    logger.info(f"Campaign {campaign.id}: shortlisted {len(ids)} creators")

    with notifications_after_commit(db) as notifications:
        notifications.notify_shortlist_uploaded(campaign, ids)
    return CampaignOutcome(campaign, len(ids), off_target_creator_ids=off_target)


def respond_to_creators(db: Session, campaign_id: str, actor, updates: List[dict]) -> CampaignOutcome:
    """Brand accepts or rejects shortlisted creators. Aggregate state is unchanged."""
    campaign = get_campaign(db, campaign_id)
    ensure_brand_lane(actor, campaign, Permission.REVIEW_SHORTLIST)
    ensure_not_archived(campaign)

    state = parse_state(CampaignState, campaign.state, "campaign state")
    if state == CampaignState.SOURCING:
        raise PreconditionFailed("no creator shortlist uploaded")
    if state in CREATORS_FINAL_STATES:
        raise PreconditionFailed("creator selection is final; shortlist review is locked")
    if not updates:
        raise ValidationError("no updates to submit")

    # Resolve everything before writing anything
    planned = {}
    for update in updates:
        status = parse_state(SelectionStatus, update.get("status"), "creator status")
        engagement = find_engagement(db, campaign.id, update.get("creator_id"))
        planned[engagement.id] = (engagement, status, clean_optional(update.get("comment")))

    changes = [
        (engagement, status, comment) for engagement, status, comment in planned.values()
        if engagement.selection_status != status or engagement.selection_comment != comment
    ]
    if changes:
        # Selection rows only move while the campaign is still shortlisted at the version we read
        guarded_update(db, Campaign, campaign, "state", [CampaignState.CREATORS_SHORTLISTED], {})
    for engagement, status, comment in changes:
        engagement.selection_status = status
        engagement.selection_comment = comment
        engagement.version = Engagement.version + 1
    db.commit()
    updated = len(changes)
    logger.info(f"Campaign {campaign.id}: shortlist review updated {updated} creator(s)")
    return CampaignOutcome(campaign, updated)


# ============================================================================
# TWO-STEP SELECTION COMMIT
# ============================================================================

def finalize_creator_amounts(
    db: Session,
    campaign_id: str,
    actor,
    decisions: Optional[List[dict]] = None,
) -> CampaignOutcome:
    """
    Lock in the negotiated amounts of every retained creator.

    Optional per-creator decisions (accept_counter / reject_counter) are
    applied first. Engagements whose negotiation is not finalized are left
    as they are. Once the creators are final this is a no-op.
    """
    campaign = get_campaign(db, campaign_id)
    ensure_brand_lane(actor, campaign, Permission.FINALIZE_SELECTION)
    state = parse_state(CampaignState, campaign.state, "campaign state")
    if state in CREATORS_FINAL_STATES:
        return CampaignOutcome(campaign, 0)
    ensure_not_archived(campaign)
    if state == CampaignState.SOURCING:
        raise PreconditionFailed("no creator shortlist uploaded")

    # Vet every decision before applying any
    planned = []
    seen = set()
    for decision in decisions or []:
        action = decision.get("action")
        if action not in FINALIZE_DECISIONS:
            raise ValidationError(f"Unknown decision '{action}'; expected one of: {', '.join(FINALIZE_DECISIONS)}")
        engagement = find_engagement(db, campaign.id, decision.get("creator_id"))
        if engagement.id in seen:
            raise ValidationError(f"More than one decision for creator '{engagement.creator_id}'")
        seen.add(engagement.id)
        negotiation_action, operation = FINALIZE_DECISIONS[action]
        negotiation.check_bid_response(engagement, negotiation_action)
        planned.append((operation, engagement))

    applied = 0
    for operation, engagement in planned:
        operation(db, engagement.id, actor)
        applied += 1

    now = datetime.utcnow()
    to_lock = db.query(Engagement).filter(
        Engagement.campaign_id == campaign.id,
        Engagement.selection_status != SelectionStatus.REJECTED,
        Engagement.negotiation_status.in_(list(NEGOTIATION_FINALIZED)),
        Engagement.amount_locked_at.is_(None)
    ).all()
    locked = 0
    for engagement in to_lock:
        count = db.query(Engagement).filter(
            Engagement.id == engagement.id,
            Engagement.amount_locked_at.is_(None)
        ).update({"amount_locked_at": now, "version": Engagement.version + 1}, synchronize_session=False)
        if count:
            locked += 1
            db.add(NegotiationEvent(
                engagement_id=engagement.id,
                actor_id=actor.id,
                event="amount_locked",
                amount=engagement.final_amount,
                from_state=engagement.negotiation_status.value,
                to_state=engagement.negotiation_status.value,
            ))

    if campaign.amounts_finalized_at is None:
        db.query(Campaign).filter(
            Campaign.id == campaign.id,
            Campaign.amounts_finalized_at.is_(None)
        ).update({"amounts_finalized_at": now, "version": Campaign.version + 1}, synchronize_session=False)
    db.commit()
    logger.info(f"Campaign {campaign.id}: amounts finalized, {applied} decision(s) applied, {locked} amount(s) locked")
    return CampaignOutcome(campaign, applied + locked)


def submit_creator_selection(db: Session, campaign_id: str, actor, expected_version: Optional[int] = None) -> CampaignOutcome:
    """Explicit confirmation that flips the campaign to creators_are_final."""
    campaign = get_campaign(db, campaign_id)
    ensure_brand_lane(actor, campaign, Permission.FINALIZE_SELECTION)
    state = parse_state(CampaignState, campaign.state, "campaign state")
    if state in CREATORS_FINAL_STATES:
        return CampaignOutcome(campaign, 0)
    ensure_not_archived(campaign)
    if state == CampaignState.SOURCING:
        raise PreconditionFailed("no creator shortlist uploaded")
    if campaign.amounts_finalized_at is None:
        raise PreconditionFailed("creator amounts not finalized")
    if not campaign.retained_engagements:
        raise PreconditionFailed("no creators retained")
    check_version(campaign, expected_version)

    count = guarded_update(db, Campaign, campaign, "state", [CampaignState.CREATORS_SHORTLISTED], {
        "state": CampaignState.CREATORS_ARE_FINAL,
        "creators_finalized_at": datetime.utcnow(),
    }, raise_on_stale=False)
    if not count:
        # Lost the race; fine if whoever won also finalized the selection
        db.refresh(campaign)
        if campaign.state in CREATORS_FINAL_STATES:
            return CampaignOutcome(campaign, 0)
        raise StaleState(f"Campaign {campaign.id} was changed by someone else; refresh and try again")

    db.commit()
    logger.info(f"Campaign {campaign.id} -> {CampaignState.CREATORS_ARE_FINAL.value}")
    return CampaignOutcome(campaign, 1)


# ============================================================================
# BRIEF
# ============================================================================

def upload_brief(db: Session, campaign_id: str, actor, fields: dict) -> Campaign:
    """
    Store the brief. Valid once creators are final; re-uploading overwrites
    (no history). The first upload publishes it.
    """
    campaign = get_campaign(db, campaign_id)
    ensure_brand_lane(actor, campaign, Permission.UPLOAD_BRIEF)
    ensure_not_archived(campaign)
    state = parse_state(CampaignState, campaign.state, "campaign state")
    if state not in CREATORS_FINAL_STATES:
        raise PreconditionFailed("creators must be finalized before uploading the brief")

    values = {name: clean_optional(fields.get(name)) for name in BRIEF_FIELDS}
    for name in REQUIRED_BRIEF_FIELDS:
        values[name] = validate_text(values[name], name)
    if values["sample_video_uri"]:
        values["sample_video_uri"] = validate_uri(values["sample_video_uri"], "sample_video_uri")

    now = datetime.utcnow()
    first_publish = campaign.brief_published_at is None
    values["brief_updated_at"] = now
    if first_publish:
        values["brief_published_at"] = now
    if state == CampaignState.CREATORS_ARE_FINAL:
        values["state"] = CampaignState.BRIEF_PUBLISHED
        if any(e.script_status != ScriptState.NONE for e in campaign.retained_engagements):
            # Script work started while the brief was pending
            values["state"] = CampaignState.IN_PRODUCTION
            values["production_started_at"] = now

    guarded_update(db, Campaign, campaign, "state", [state], values)
    db.commit()
    logger.info(f"Campaign {campaign.id}: brief {'published' if first_publish else 'updated'}")

    if first_publish:
        with notifications_after_commit(db) as notifications:
            notifications.notify_brief_published(campaign)
    if values.get("state") == CampaignState.IN_PRODUCTION:
        maybe_complete_campaign(db, campaign.id)
    return campaign


def get_brief(db: Session, campaign_id: str, user) -> dict:
    campaign = get_campaign(db, campaign_id)
    if get_user_type(user) == UserType.CREATOR:
        engagement = find_engagement(db, campaign.id, user.id)
        if engagement.selection_status == SelectionStatus.REJECTED:
            raise Forbidden("creator was not selected for this campaign")
        if not campaign.brief_published:
            raise PreconditionFailed("brief not yet published")
        if engagement.negotiation_status not in NEGOTIATION_FINALIZED:
            raise PreconditionFailed("amount not finalized")
    else:
        if not can_view_campaign(user, campaign):
            raise Forbidden("You cannot view this campaign")
        if not campaign.brief_published:
            raise PreconditionFailed("brief not yet published")

    brief = {name: getattr(campaign, name) for name in BRIEF_FIELDS}
    brief.update({
        "campaign_id": campaign.id,
        "campaign_name": campaign.name,
        "published_at": campaign.brief_published_at,
        "updated_at": campaign.brief_updated_at,
    })
    return brief


# ============================================================================
# READS
# ============================================================================

def get_campaign_for(db: Session, campaign_id: str, user) -> Campaign:
    campaign = get_campaign(db, campaign_id)
    if not can_view_campaign(user, campaign):
        raise Forbidden("You cannot view this campaign")
    return campaign


def list_campaign_engagements(db: Session, campaign_id: str, user, include_rejected: bool = True) -> List[Engagement]:
    campaign = get_campaign(db, campaign_id)
    ensure_brand_lane(user, campaign, Permission.VIEW_CAMPAIGN)
    query = db.query(Engagement).filter(Engagement.campaign_id == campaign.id)
    if not include_rejected:
        query = query.filter(Engagement.selection_status != SelectionStatus.REJECTED)
    return query.order_by(Engagement.created_at).all()


def list_creator_engagements(db: Session, user, negotiation_status: Optional[str] = None) -> List[Engagement]:
    query = db.query(Engagement).filter(Engagement.creator_id == user.id)
    if negotiation_status:
        query = query.filter(Engagement.negotiation_status == parse_state(NegotiationState, negotiation_status, "negotiation state"))
    return query.order_by(Engagement.created_at.desc()).all()


def list_campaigns(db: Session, user, include_archived: bool = False) -> List[Campaign]:
    """Campaigns the caller can see: all for admins, the brand's own for brand users, engaged ones for creators."""
    user_type = get_user_type(user)
    query = db.query(Campaign)
    if user_type == UserType.CREATOR:
        query = query.join(Engagement).filter(Engagement.creator_id == user.id)
    elif user_type != UserType.ADMIN:
        query = query.filter(Campaign.brand_id == user.brand_id)
    if not include_archived:
        query = query.filter(Campaign.archived_at.is_(None))
    return query.order_by(Campaign.created_at.desc()).all()
