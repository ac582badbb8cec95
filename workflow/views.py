# Read-side projections of campaigns and engagements
# Routers return these dicts as-is.

from database.marketplace_models import Campaign, Engagement, NegotiationEvent
from workflow.states import (
    NEGOTIATION_FINALIZED, CampaignState, ContentState, ScriptState, SelectionStatus,
    campaign_view_state,
)


def engagement_stage(engagement: Engagement) -> str:
    """Furthest sub-machine the engagement has reached, tagged with its state."""
    if engagement.selection_status == SelectionStatus.REJECTED:
        return "selection_rejected"
    if engagement.content_status != ContentState.NONE:
        return f"content_{engagement.content_status.value}"
    if engagement.script_status != ScriptState.NONE:
        return f"script_{engagement.script_status.value}"
    return f"negotiation_{engagement.negotiation_status.value}"


def _iso(value):
    return value.isoformat() if value else None


def engagement_snapshot(engagement: Engagement) -> dict:
    creator = engagement.creator
    return {
        "id": engagement.id,
        "campaign_id": engagement.campaign_id,
        "creator_id": engagement.creator_id,
        "creator_name": creator.display_name if creator else None,
        "stage": engagement_stage(engagement),
        "version": engagement.version,
        "selection": {
            "status": engagement.selection_status.value,
            "comment": engagement.selection_comment,
        },
        "negotiation": {
            "status": engagement.negotiation_status.value,
            "creator_bid_amount": engagement.creator_bid_amount,
            "brand_proposed_amount": engagement.brand_proposed_amount,
            "final_amount": engagement.final_amount,
            "final_amount_is_payable": engagement.negotiation_status in NEGOTIATION_FINALIZED,
            "bid_rounds": engagement.bid_rounds,
            "amount_locked_at": _iso(engagement.amount_locked_at),
            "updated_at": _iso(engagement.negotiation_updated_at),
        },
        "script": {
            "status": engagement.script_status.value,
            "content": engagement.script_content,
            "feedback": engagement.script_feedback,
            "submitted_at": _iso(engagement.script_submitted_at),
            "reviewed_at": _iso(engagement.script_reviewed_at),
        },
        "content": {
            "status": engagement.content_status.value,
            "content_uri": engagement.content_uri,
            "live_uri": engagement.live_uri,
            "feedback": engagement.content_feedback,
            "submitted_at": _iso(engagement.content_submitted_at),
            "reviewed_at": _iso(engagement.content_reviewed_at),
            "went_live_at": _iso(engagement.went_live_at),
        },
    }


def campaign_snapshot(campaign: Campaign) -> dict:
    engagements = campaign.engagements
    retained = campaign.retained_engagements
    finalized = [
        e for e in retained
        if e.negotiation_status in NEGOTIATION_FINALIZED
    ]
    return {
        "id": campaign.id,
        "brand_id": campaign.brand_id,
        "name": campaign.name,
        "description": campaign.description,
        "budget": campaign.budget,
        "cost_per_view": campaign.cost_per_view,
        "target_categories": campaign.target_categories or [],
        "min_followers": campaign.min_followers,
        "max_followers": campaign.max_followers,
        "creator_count": campaign.creator_count,
        "go_live_date": _iso(campaign.go_live_date),
        "negotiation_deadline": _iso(campaign.negotiation_deadline),
        "negotiation_rounds": campaign.negotiation_rounds,
        "state": campaign.state.value,
        "view_state": campaign_view_state(CampaignState(campaign.state), campaign.brief_published),
        "brief_published": campaign.brief_published,
        "archived": campaign.is_archived,
        "version": campaign.version,
        "shortlisted_count": len(engagements),
        "retained_count": len(retained),
        "finalized_count": len(finalized),
        "committed_amount": sum(e.final_amount or 0 for e in finalized),
        "shortlisted_at": _iso(campaign.shortlisted_at),
        "amounts_finalized_at": _iso(campaign.amounts_finalized_at),
        "creators_finalized_at": _iso(campaign.creators_finalized_at),
        "production_started_at": _iso(campaign.production_started_at),
        "completed_at": _iso(campaign.completed_at),
        "archived_at": _iso(campaign.archived_at),
        "created_at": _iso(campaign.created_at),
    }


def event_snapshot(event: NegotiationEvent) -> dict:
    return {
        "id": event.id,
        "event": event.event,
        "actor_id": event.actor_id,
        "amount": event.amount,
        "from_state": event.from_state,
        "to_state": event.to_state,
        "created_at": _iso(event.created_at),
    }
