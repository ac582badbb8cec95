# Pydantic Schemas for the Campaign Engagement Workflow
# Request bodies only; responses are plain dicts built in workflow.views

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


# ============================================================================
# ENUMS
# ============================================================================

class BidResponseAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class FinalizeDecisionAction(str, Enum):
    ACCEPT_COUNTER = "accept_counter"
    REJECT_COUNTER = "reject_counter"


# ============================================================================
# CAMPAIGN SCHEMAS
# ============================================================================

class CampaignCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    brand_id: Optional[str] = None  # Admins only; brand users always create for their own brand
    budget: int = Field(0, ge=0)
    cost_per_view: int = Field(0, ge=0)
    target_categories: List[str] = []
    min_followers: Optional[int] = Field(None, ge=0)
    max_followers: Optional[int] = Field(None, ge=0)
    creator_count: Optional[int] = Field(None, gt=0)
    go_live_date: Optional[datetime] = None
    negotiation_deadline: Optional[datetime] = None
    negotiation_rounds: Optional[int] = Field(None, gt=0)


class ShortlistUpload(BaseModel):
    campaign_id: str
    creator_ids: List[str]
    expected_version: Optional[int] = None


class CreatorStatusUpdate(BaseModel):
    creator_id: str
    status: str  # pending | accepted | rejected
    comment: Optional[str] = Field(None, max_length=1000)


class RespondToCreators(BaseModel):
    campaign_id: str
    updates: List[CreatorStatusUpdate]


class FinalizeDecision(BaseModel):
    creator_id: str
    action: FinalizeDecisionAction


class FinalizeAmounts(BaseModel):
    campaign_id: str
    decisions: List[FinalizeDecision] = []


class SubmitSelection(BaseModel):
    campaign_id: str
    expected_version: Optional[int] = None


class BriefUpload(BaseModel):
    campaign_id: str
    video_title: str = Field(..., min_length=1, max_length=255)
    primary_focus: str = Field(..., min_length=1)
    secondary_focus: Optional[str] = None
    dos: Optional[str] = None
    donts: Optional[str] = None
    cta: Optional[str] = None
    sample_video_uri: Optional[str] = Field(None, max_length=1000)
    script_template: Optional[str] = None


# ============================================================================
# NEGOTIATION SCHEMAS
# ============================================================================

class EngagementAction(BaseModel):
    """Body of every action that targets one engagement and carries nothing else."""
    engagement_id: str
    expected_version: Optional[int] = None


class BidSubmit(EngagementAction):
    amount: int = Field(..., gt=0)


class AmountProposal(EngagementAction):
    amount: Optional[int] = Field(None, gt=0)  # Defaults to campaign CPV x creator average views


class CounterProposal(EngagementAction):
    amount: int = Field(..., gt=0)


class BidResponse(EngagementAction):
    action: BidResponseAction
    counter_amount: Optional[int] = Field(None, gt=0)


# ============================================================================
# SCRIPT / CONTENT SCHEMAS
# ============================================================================

class ScriptSubmit(EngagementAction):
    content: str = Field(..., min_length=1)


class ContentUpload(EngagementAction):
    content_uri: str = Field(..., min_length=1, max_length=1000)
    live_uri: Optional[str] = Field(None, max_length=1000)


class GoLive(EngagementAction):
    live_url: str = Field(..., min_length=1, max_length=1000)


class ReviewRequest(BaseModel):
    engagement_id: str
    action: str  # approved | rejected | revision_requested
    feedback: Optional[str] = Field(None, max_length=2000)


class BatchReviewRequest(BaseModel):
    campaign_id: str
    reviews: List[ReviewRequest]
