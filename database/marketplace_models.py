# Campaign Workflow Database Models
# Campaigns, per-creator engagements, negotiation history and notifications.
# State columns use the closed enums from workflow.states.

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, JSON, Enum, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime

# Use the same Base from existing models
from database.models import Base, generate_uuid
from workflow.states import (
    CampaignState, NegotiationState, ScriptState, ContentState, SelectionStatus,
)


def _state_enum(enum_cls, name):
    return Enum(enum_cls, values_callable=lambda x: [e.value for e in x], name=name)


# ============================================================================
# CAMPAIGN
# ============================================================================

class Campaign(Base):
    """A brand's campaign and its aggregate phase."""
    __tablename__ = "campaigns"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    brand_id = Column(String(36), ForeignKey("brands.id"), nullable=False)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)

    name = Column(String(255), nullable=False)
    description = Column(Text)

    # Budget (whole currency units)
    budget = Column(Integer, default=0)
    cost_per_view = Column(Integer, default=0)

    # Targeting
    target_categories = Column(JSON)  # ["tech", "gaming"]
    min_followers = Column(Integer)
    max_followers = Column(Integer)
    creator_count = Column(Integer)   # How many creators the brand wants

    # Timeline
    go_live_date = Column(DateTime)
    negotiation_deadline = Column(DateTime)
    negotiation_rounds = Column(Integer)  # Max creator bids per engagement; falls back to config

    # Aggregate state
    state = Column(_state_enum(CampaignState, "campaignstatedb"), nullable=False, default=CampaignState.SOURCING)
    shortlisted_at = Column(DateTime)
    amounts_finalized_at = Column(DateTime)
    creators_finalized_at = Column(DateTime)
    production_started_at = Column(DateTime)
    completed_at = Column(DateTime)
    archived_at = Column(DateTime)

    # ===== BRIEF (mutable, no history) =====
    video_title = Column(String(255))
    primary_focus = Column(Text)
    secondary_focus = Column(Text)
    dos = Column(Text)
    donts = Column(Text)
    cta = Column(Text)
    sample_video_uri = Column(String(1000))
    script_template = Column(Text)
    brief_published_at = Column(DateTime)
    brief_updated_at = Column(DateTime)
    # =======================================

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    brand = relationship("Brand", back_populates="campaigns")
    engagements = relationship("Engagement", back_populates="campaign", cascade="all, delete-orphan")

    @property
    def brief_published(self) -> bool:
        return self.brief_published_at is not None

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None

    @property
    def retained_engagements(self):
        return [e for e in self.engagements if e.selection_status != SelectionStatus.REJECTED]


# ============================================================================
# ENGAGEMENT
# ============================================================================

class Engagement(Base):
    """One creator's participation in one campaign.

    Holds three independently addressable sub-machines: negotiation, script
    and content. Forward progress in each is gated by the previous one.
    """
    __tablename__ = "engagements"
    __table_args__ = (
        UniqueConstraint("campaign_id", "creator_id", name="uq_engagement_campaign_creator"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    campaign_id = Column(String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True)
    creator_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Shortlist review
    selection_status = Column(_state_enum(SelectionStatus, "selectionstatusdb"), nullable=False, default=SelectionStatus.PENDING)
    selection_comment = Column(Text)

    # Negotiation
    negotiation_status = Column(_state_enum(NegotiationState, "negotiationstatedb"), nullable=False, default=NegotiationState.NONE)
    creator_bid_amount = Column(Integer)
    brand_proposed_amount = Column(Integer)
    final_amount = Column(Integer)
    bid_rounds = Column(Integer, nullable=False, default=0)
    amount_locked_at = Column(DateTime)
    negotiation_updated_at = Column(DateTime)

    # Script
    script_status = Column(_state_enum(ScriptState, "scriptstatedb"), nullable=False, default=ScriptState.NONE)
    script_content = Column(Text)
    script_feedback = Column(Text)
    script_submitted_at = Column(DateTime)
    script_reviewed_at = Column(DateTime)

    # Content
    content_status = Column(_state_enum(ContentState, "contentstatedb"), nullable=False, default=ContentState.NONE)
    content_uri = Column(String(1000))
    live_uri = Column(String(1000))
    content_feedback = Column(Text)
    content_submitted_at = Column(DateTime)
    content_reviewed_at = Column(DateTime)
    went_live_at = Column(DateTime)

    # Bumped on every transition; guarded updates match on it
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    campaign = relationship("Campaign", back_populates="engagements")
    creator = relationship("User")
    negotiation_events = relationship(
        "NegotiationEvent",
        back_populates="engagement",
        cascade="all, delete-orphan",
        order_by="NegotiationEvent.created_at",
    )


# ============================================================================
# NEGOTIATION HISTORY
# ============================================================================

class NegotiationEvent(Base):
    """Append-only record of each negotiation move."""
    __tablename__ = "negotiation_events"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    engagement_id = Column(String(36), ForeignKey("engagements.id", ondelete="CASCADE"), nullable=False, index=True)
    actor_id = Column(String(36), ForeignKey("users.id"), nullable=True)

    event = Column(String(50), nullable=False)  # bid_submitted, counter_proposed, deal_accepted, ...
    amount = Column(Integer)
    from_state = Column(String(30))
    to_state = Column(String(30))

    created_at = Column(DateTime, default=datetime.utcnow)  # sub-second ordering

    engagement = relationship("Engagement", back_populates="negotiation_events")


# ============================================================================
# NOTIFICATION
# ============================================================================

class Notification(Base):
    """User notifications."""
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(String(50), nullable=False)  # shortlist_uploaded, brief_published, script_reviewed, etc.
    title = Column(String(200), nullable=False)
    message = Column(Text)
    data = Column(JSON)  # Additional context (campaign_id, engagement_id, etc.)

    read = Column(Boolean, default=False)
    read_at = Column(DateTime)

    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    user = relationship("User", backref="notifications")
