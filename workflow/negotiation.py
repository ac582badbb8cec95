"""
Negotiation sub-machine.

Creator writes bids and answers the brand's amount; the brand proposes,
accepts or counters. Every move is a guarded update against the state the
caller read and is appended to the engagement's negotiation history.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from auth.lanes import ensure_brand_lane, ensure_creator_lane, can_view_engagement
from auth.roles import Permission
from config.app_config import DEFAULT_NEGOTIATION_ROUNDS
from database.marketplace_models import Engagement, NegotiationEvent
from services.notification_service import NotificationType, notifications_after_commit
from workflow.errors import Forbidden, PreconditionFailed, ValidationError
from workflow.progress import maybe_complete_campaign
from workflow.states import (
    NegotiationAction, NegotiationState,
    next_negotiation_state, parse_state,
)
from workflow.store import check_version, ensure_not_archived, ensure_selected, get_engagement, guarded_update
from workflow.validation import validate_amount

logger = logging.getLogger(__name__)

_VERBS = {
    NegotiationAction.SUBMIT_BID: "submit a bid",
    NegotiationAction.PROPOSE_AMOUNT: "propose an amount",
    NegotiationAction.ACCEPT_BID: "accept the creator's bid",
    NegotiationAction.COUNTER_PROPOSE: "counter-propose",
    NegotiationAction.REJECT_BID: "reject the bid",
    NegotiationAction.ACCEPT_DEAL: "accept the deal",
    NegotiationAction.REJECT_DEAL: "reject the deal",
}

_EVENT_NAMES = {
    NegotiationAction.SUBMIT_BID: "bid_submitted",
    NegotiationAction.PROPOSE_AMOUNT: "amount_proposed",
    NegotiationAction.ACCEPT_BID: "bid_accepted",
    NegotiationAction.COUNTER_PROPOSE: "counter_proposed",
    NegotiationAction.REJECT_BID: "bid_rejected",
    NegotiationAction.ACCEPT_DEAL: "deal_accepted",
    NegotiationAction.REJECT_DEAL: "deal_rejected",
}


def _ensure_negotiable(engagement: Engagement):
    ensure_not_archived(engagement.campaign)
    ensure_selected(engagement)


def _ensure_transition(engagement: Engagement, action: NegotiationAction):
    current = parse_state(NegotiationState, engagement.negotiation_status, "negotiation state")
    target = next_negotiation_state(action, current)
    if target is None:
        raise PreconditionFailed(f"cannot {_VERBS[action]} while negotiation is {current.value}")
    return current, target


def _move(
    db: Session,
    engagement: Engagement,
    actor,
    action: NegotiationAction,
    values: dict,
    amount: Optional[int] = None,
) -> NegotiationState:
    """Run one negotiation transition from the state we read."""
    current, target = _ensure_transition(engagement, action)

    guarded_update(db, Engagement, engagement, "negotiation_status", [current], {
        **values,
        "negotiation_status": target,
        "negotiation_updated_at": datetime.utcnow(),
    })
    db.add(NegotiationEvent(
        engagement_id=engagement.id,
        actor_id=actor.id,
        event=_EVENT_NAMES[action],
        amount=amount,
        from_state=current.value,
        to_state=target.value,
    ))
    db.commit()
    logger.info(f"Engagement {engagement.id}: {action.value} {current.value} -> {target.value}")
    return target


# ============================================================================
# CREATOR LANE
# ============================================================================

def submit_bid(db: Session, engagement_id: str, creator, amount: int, expected_version: Optional[int] = None) -> Engagement:
    """
    Creator names a fee. Opening bid moves none -> bid_pending; later bids
    keep the current state. Any brand amount on file is voided because the
    figures are no longer mutually agreed.
    """
    engagement = get_engagement(db, engagement_id)
    ensure_creator_lane(creator, engagement, Permission.SUBMIT_BID)
    validate_amount(amount)
    check_version(engagement, expected_version)
    _ensure_negotiable(engagement)

    campaign = engagement.campaign
    if campaign.negotiation_deadline and datetime.utcnow() > campaign.negotiation_deadline:
        raise PreconditionFailed("negotiation deadline has passed")
    limit = campaign.negotiation_rounds or DEFAULT_NEGOTIATION_ROUNDS
    if engagement.bid_rounds >= limit:
        raise PreconditionFailed(f"negotiation round limit reached ({limit} bids)")

    _move(db, engagement, creator, NegotiationAction.SUBMIT_BID, {
        "creator_bid_amount": amount,
        "final_amount": None,
        "bid_rounds": Engagement.bid_rounds + 1,
    }, amount=amount)

    with notifications_after_commit(db) as notifications:
        notifications.notify_brand(
            engagement, NotificationType.BID_SUBMITTED,
            "New bid received",
            f"{engagement.creator.display_name} bid {amount:,} on '{campaign.name}'",
        )
    return engagement


def accept_deal(db: Session, engagement_id: str, creator, expected_version: Optional[int] = None) -> Engagement:
    """Creator accepts the brand's amount; the negotiation is finalized."""
    engagement = get_engagement(db, engagement_id)
    ensure_creator_lane(creator, engagement, Permission.RESPOND_TO_DEAL)
    check_version(engagement, expected_version)
    _ensure_negotiable(engagement)
    current = parse_state(NegotiationState, engagement.negotiation_status, "negotiation state")
    if current in (NegotiationState.BID_PENDING, NegotiationState.AMOUNT_NEGOTIATED) and not (engagement.final_amount or 0) > 0:
        raise PreconditionFailed("no brand amount on the table to accept")

    _move(db, engagement, creator, NegotiationAction.ACCEPT_DEAL, {}, amount=engagement.final_amount)

    with notifications_after_commit(db) as notifications:
        notifications.notify_brand(
            engagement, NotificationType.DEAL_ACCEPTED,
            "Deal accepted",
            f"{engagement.creator.display_name} accepted {engagement.final_amount:,} for '{engagement.campaign.name}'",
        )
    return engagement


def reject_deal(db: Session, engagement_id: str, creator, expected_version: Optional[int] = None) -> Engagement:
    engagement = get_engagement(db, engagement_id)
    ensure_creator_lane(creator, engagement, Permission.RESPOND_TO_DEAL)
    check_version(engagement, expected_version)
    ensure_not_archived(engagement.campaign)

    _move(db, engagement, creator, NegotiationAction.REJECT_DEAL, {})

    with notifications_after_commit(db) as notifications:
        notifications.notify_brand(
            engagement, NotificationType.NEGOTIATION_REJECTED,
            "Deal declined",
            f"{engagement.creator.display_name} declined '{engagement.campaign.name}'",
        )
    maybe_complete_campaign(db, engagement.campaign_id)
    return engagement


# ============================================================================
# BRAND LANE
# ============================================================================

def check_bid_response(engagement: Engagement, action: NegotiationAction):
    """
    Preconditions of accept_bid / reject_bid, checked without writing.
    Lets a caller vet several responses before applying any of them.
    """
    if action == NegotiationAction.ACCEPT_BID:
        _ensure_negotiable(engagement)
        if not (engagement.creator_bid_amount or 0) > 0:
            raise PreconditionFailed("creator has not submitted a bid")
    else:
        ensure_not_archived(engagement.campaign)
    _ensure_transition(engagement, action)


def default_proposal(engagement: Engagement) -> int:
    """Campaign CPV x the creator's average views."""
    profile = engagement.creator.creator_profile
    avg_views = profile.avg_views if profile else 0
    return (engagement.campaign.cost_per_view or 0) * (avg_views or 0)


def propose_amount(db: Session, engagement_id: str, actor, amount: Optional[int] = None, expected_version: Optional[int] = None) -> Engagement:
    """Brand puts an amount on the table for the creator to accept."""
    engagement = get_engagement(db, engagement_id)
    ensure_brand_lane(actor, engagement.campaign, Permission.PROPOSE_AMOUNT)
    if amount is None:
        amount = default_proposal(engagement)
        if amount <= 0:
            raise ValidationError("no amount given and campaign cost per view x creator average views is zero")
    validate_amount(amount)
    check_version(engagement, expected_version)
    _ensure_negotiable(engagement)

    _move(db, engagement, actor, NegotiationAction.PROPOSE_AMOUNT, {
        "brand_proposed_amount": amount,
        "final_amount": amount,
    }, amount=amount)

    with notifications_after_commit(db) as notifications:
        notifications.notify_creator(
            engagement, NotificationType.AMOUNT_PROPOSED,
            "New offer",
            f"The brand offered {amount:,} for '{engagement.campaign.name}'",
        )
    return engagement


def accept_bid(db: Session, engagement_id: str, actor, expected_version: Optional[int] = None) -> Engagement:
    """Brand accepts the creator's bid as is; the bid becomes the final amount."""
    engagement = get_engagement(db, engagement_id)
    ensure_brand_lane(actor, engagement.campaign, Permission.RESPOND_TO_BID)
    check_version(engagement, expected_version)
    check_bid_response(engagement, NegotiationAction.ACCEPT_BID)

    bid = engagement.creator_bid_amount
    _move(db, engagement, actor, NegotiationAction.ACCEPT_BID, {"final_amount": bid}, amount=bid)

    with notifications_after_commit(db) as notifications:
        notifications.notify_creator(
            engagement, NotificationType.BID_ACCEPTED,
            "Bid accepted",
            f"Your bid of {bid:,} for '{engagement.campaign.name}' was accepted",
        )
    return engagement


def counter_propose(db: Session, engagement_id: str, actor, amount: int, expected_version: Optional[int] = None) -> Engagement:
    """Brand answers a creator bid with a different amount, awaiting the creator."""
    engagement = get_engagement(db, engagement_id)
    ensure_brand_lane(actor, engagement.campaign, Permission.RESPOND_TO_BID)
    validate_amount(amount, "counter_amount")
    check_version(engagement, expected_version)
    _ensure_negotiable(engagement)

    _move(db, engagement, actor, NegotiationAction.COUNTER_PROPOSE, {
        "brand_proposed_amount": amount,
        "final_amount": amount,
    }, amount=amount)

    with notifications_after_commit(db) as notifications:
        notifications.notify_creator(
            engagement, NotificationType.AMOUNT_PROPOSED,
            "Counter offer",
            f"The brand countered with {amount:,} for '{engagement.campaign.name}'",
        )
    return engagement


def reject_bid(db: Session, engagement_id: str, actor, expected_version: Optional[int] = None) -> Engagement:
    """Brand ends the monetary track for this engagement."""
    engagement = get_engagement(db, engagement_id)
    ensure_brand_lane(actor, engagement.campaign, Permission.RESPOND_TO_BID)
    check_version(engagement, expected_version)
    check_bid_response(engagement, NegotiationAction.REJECT_BID)

    _move(db, engagement, actor, NegotiationAction.REJECT_BID, {})

    with notifications_after_commit(db) as notifications:
        notifications.notify_creator(
            engagement, NotificationType.NEGOTIATION_REJECTED,
            "Bid not accepted",
            f"The brand declined your bid for '{engagement.campaign.name}'",
        )
    maybe_complete_campaign(db, engagement.campaign_id)
    return engagement


def respond_to_bid(
    db: Session,
    engagement_id: str,
    actor,
    action: str,
    counter_amount: Optional[int] = None,
    expected_version: Optional[int] = None,
) -> Engagement:
    """
    Legacy single wire action: 'accept' without a counter accepts the bid,
    'accept' with a counter_amount counter-proposes, 'reject' rejects.
    """
    if action == "accept":
        if counter_amount is None:
            return accept_bid(db, engagement_id, actor, expected_version)
        return counter_propose(db, engagement_id, actor, counter_amount, expected_version)
    if action == "reject":
        return reject_bid(db, engagement_id, actor, expected_version)
    raise ValidationError(f"Unknown bid response '{action}'; expected one of: accept, reject")


# ============================================================================
# HISTORY
# ============================================================================

def negotiation_history(db: Session, engagement_id: str, user) -> List[NegotiationEvent]:
    engagement = get_engagement(db, engagement_id)
    if not can_view_engagement(user, engagement):
        raise Forbidden("You cannot view this negotiation")
    return list(engagement.negotiation_events)
