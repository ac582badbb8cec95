# Campaigns Router for the Creator Campaign Platform
# Campaign-level phases: shortlist, creator review, two-step selection commit, brief

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database.config import get_db
from database.models import User
from auth.dependencies import get_current_user
from auth.decorators import require_admin
from schemas.workflow import (
    CampaignCreate,
    ShortlistUpload,
    RespondToCreators,
    FinalizeAmounts,
    SubmitSelection,
    BriefUpload,
)
from workflow import campaign_state
from workflow.views import campaign_snapshot, engagement_snapshot

router = APIRouter(prefix="/campaign", tags=["Campaigns"])


def _outcome_to_response(outcome) -> dict:
    response = campaign_snapshot(outcome.campaign)
    response["updated_count"] = outcome.updated_count
    return response


# ============================================================================
# BRAND ENDPOINTS (Create & Manage Campaigns)
# ============================================================================

@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    campaign_data: CampaignCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a campaign in the sourcing phase."""
    campaign = campaign_state.create_campaign(db, current_user, campaign_data.dict())
    return campaign_snapshot(campaign)


@router.get("", response_model=dict)
async def list_campaigns(
    include_archived: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    campaigns = campaign_state.list_campaigns(db, current_user, include_archived)
    return {"campaigns": [campaign_snapshot(c) for c in campaigns], "total": len(campaigns)}


@router.post("/respond-creators", response_model=dict)
async def respond_to_creators(
    data: RespondToCreators,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Accept or reject shortlisted creators, with an optional comment each."""
    outcome = campaign_state.respond_to_creators(
        db, data.campaign_id, current_user, [u.dict() for u in data.updates]
    )
    return _outcome_to_response(outcome)


@router.post("/finalize-amounts", response_model=dict)
async def finalize_amounts(
    data: FinalizeAmounts,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    First half of the selection commit: lock the finalized amounts.
    Safe to repeat; reports updated_count = 0 once creators are final.
    """
    decisions = [{"creator_id": d.creator_id, "action": d.action.value} for d in data.decisions]
    outcome = campaign_state.finalize_creator_amounts(db, data.campaign_id, current_user, decisions)
    return _outcome_to_response(outcome)


@router.post("/submit-selection", response_model=dict)
async def submit_selection(
    data: SubmitSelection,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Second half of the selection commit: creators become final."""
    outcome = campaign_state.submit_creator_selection(db, data.campaign_id, current_user, data.expected_version)
    return _outcome_to_response(outcome)


@router.post("/brief", response_model=dict)
async def upload_brief(
    data: BriefUpload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Publish or overwrite the campaign brief."""
    fields = data.dict(exclude={"campaign_id"})
    campaign = campaign_state.upload_brief(db, data.campaign_id, current_user, fields)
    return campaign_snapshot(campaign)


@router.post("/{campaign_id}/archive", response_model=dict)
async def archive_campaign(
    campaign_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    outcome = campaign_state.archive_campaign(db, campaign_id, current_user)
    return _outcome_to_response(outcome)


# ============================================================================
# ADMIN ENDPOINTS
# ============================================================================

@router.post("/shortlist", response_model=dict)
async def upload_shortlist(
    data: ShortlistUpload,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin())
):
    """Attach the creator shortlist to a sourcing campaign."""
    outcome = campaign_state.upload_creator_shortlist(
        db, data.campaign_id, current_user, data.creator_ids, data.expected_version
    )
    response = _outcome_to_response(outcome)
    response["off_target_creator_ids"] = outcome.off_target_creator_ids or []
    return response


# ============================================================================
# SHARED READS
# ============================================================================

@router.get("/{campaign_id}", response_model=dict)
async def get_campaign(
    campaign_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    campaign = campaign_state.get_campaign_for(db, campaign_id, current_user)
    return campaign_snapshot(campaign)


@router.get("/{campaign_id}/brief", response_model=dict)
async def get_brief(
    campaign_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Published brief; creators also need a finalized amount on this campaign."""
    return campaign_state.get_brief(db, campaign_id, current_user)


@router.get("/{campaign_id}/engagements", response_model=dict)
async def list_engagements(
    campaign_id: str,
    include_rejected: bool = Query(True),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    engagements = campaign_state.list_campaign_engagements(db, campaign_id, current_user, include_rejected)
    return {
        "campaign_id": campaign_id,
        "engagements": [engagement_snapshot(e) for e in engagements],
        "total": len(engagements),
    }
