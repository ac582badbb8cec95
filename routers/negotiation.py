"""
Negotiation Router
Fee negotiation between a brand and one shortlisted creator
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.config import get_db
from database.models import User
from auth.dependencies import get_current_user
from schemas.workflow import (
    EngagementAction,
    BidSubmit,
    AmountProposal,
    CounterProposal,
    BidResponse,
)
from workflow import negotiation
from workflow.views import engagement_snapshot, event_snapshot

router = APIRouter(prefix="/negotiation", tags=["Negotiation"])


# ============================================================================
# CREATOR ENDPOINTS
# ============================================================================

@router.post("/bid", response_model=dict)
async def submit_bid(
    data: BidSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Submit or revise the creator's bid. Voids any brand amount on file."""
    engagement = negotiation.submit_bid(db, data.engagement_id, current_user, data.amount, data.expected_version)
    return engagement_snapshot(engagement)


@router.post("/accept-deal", response_model=dict)
async def accept_deal(
    data: EngagementAction,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    engagement = negotiation.accept_deal(db, data.engagement_id, current_user, data.expected_version)
    return engagement_snapshot(engagement)


@router.post("/reject-deal", response_model=dict)
async def reject_deal(
    data: EngagementAction,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    engagement = negotiation.reject_deal(db, data.engagement_id, current_user, data.expected_version)
    return engagement_snapshot(engagement)


# ============================================================================
# BRAND ENDPOINTS
# ============================================================================

@router.post("/propose", response_model=dict)
async def propose_amount(
    data: AmountProposal,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Put an amount on the table; omitted amount prices at CPV x average views."""
    engagement = negotiation.propose_amount(db, data.engagement_id, current_user, data.amount, data.expected_version)
    return engagement_snapshot(engagement)


@router.post("/accept-bid", response_model=dict)
async def accept_bid(
    data: EngagementAction,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    engagement = negotiation.accept_bid(db, data.engagement_id, current_user, data.expected_version)
    return engagement_snapshot(engagement)


@router.post("/counter", response_model=dict)
async def counter_propose(
    data: CounterProposal,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    engagement = negotiation.counter_propose(db, data.engagement_id, current_user, data.amount, data.expected_version)
    return engagement_snapshot(engagement)


@router.post("/respond", response_model=dict)
async def respond_to_bid(
    data: BidResponse,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """accept | accept with counter_amount | reject, in one call."""
    engagement = negotiation.respond_to_bid(
        db, data.engagement_id, current_user,
        data.action.value, data.counter_amount, data.expected_version,
    )
    return engagement_snapshot(engagement)


# ============================================================================
# HISTORY
# ============================================================================

@router.get("/{engagement_id}/history", response_model=dict)
async def get_history(
    engagement_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    events = negotiation.negotiation_history(db, engagement_id, current_user)
    return {"engagement_id": engagement_id, "events": [event_snapshot(e) for e in events]}
