# Schemas module for the Creator Campaign Platform
# Organizes all Pydantic schemas in a modular structure

from schemas.workflow import (
    # Enums
    BidResponseAction,
    FinalizeDecisionAction,

    # Campaign schemas
    CampaignCreate,
    ShortlistUpload,
    CreatorStatusUpdate,
    RespondToCreators,
    FinalizeDecision,
    FinalizeAmounts,
    SubmitSelection,
    BriefUpload,

    # Negotiation schemas
    EngagementAction,
    BidSubmit,
    AmountProposal,
    CounterProposal,
    BidResponse,

    # Script / content schemas
    ScriptSubmit,
    ContentUpload,
    GoLive,
    ReviewRequest,
    BatchReviewRequest,
)

__all__ = [
    "BidResponseAction",
    "FinalizeDecisionAction",
    "CampaignCreate",
    "ShortlistUpload",
    "CreatorStatusUpdate",
    "RespondToCreators",
    "FinalizeDecision",
    "FinalizeAmounts",
    "SubmitSelection",
    "BriefUpload",
    "EngagementAction",
    "BidSubmit",
    "AmountProposal",
    "CounterProposal",
    "BidResponse",
    "ScriptSubmit",
    "ContentUpload",
    "GoLive",
    "ReviewRequest",
    "BatchReviewRequest",
]
