# State definitions for the campaign engagement workflow
# Each sub-machine is a closed str enum plus an explicit transition table.

import enum
from typing import Dict, FrozenSet, Optional, Type, TypeVar

from workflow.errors import ValidationError


# ============================================================================
# NEGOTIATION
# ============================================================================

class NegotiationState(str, enum.Enum):
    NONE = "none"
    BID_PENDING = "bid_pending"                # creator bid awaiting the brand
    AMOUNT_NEGOTIATED = "amount_negotiated"    # figures still moving between the two sides
    AMOUNT_FINALIZED = "amount_finalized"      # brand accepted the creator's bid
    ACCEPTED = "accepted"                      # creator accepted the brand's amount
    REJECTED = "rejected"


class NegotiationAction(str, enum.Enum):
    SUBMIT_BID = "submit_bid"
    PROPOSE_AMOUNT = "propose_amount"
    ACCEPT_BID = "accept_bid"
    COUNTER_PROPOSE = "counter_propose"
    REJECT_BID = "reject_bid"
    ACCEPT_DEAL = "accept_deal"
    REJECT_DEAL = "reject_deal"


NEGOTIATION_FINALIZED: FrozenSet[NegotiationState] = frozenset({
    NegotiationState.AMOUNT_FINALIZED,
    NegotiationState.ACCEPTED,
})

NEGOTIATION_TERMINAL: FrozenSet[NegotiationState] = NEGOTIATION_FINALIZED | {NegotiationState.REJECTED}

NEGOTIATION_OPEN: FrozenSet[NegotiationState] = frozenset({
    NegotiationState.NONE,
    NegotiationState.BID_PENDING,
    NegotiationState.AMOUNT_NEGOTIATED,
})

# action -> {from_state: to_state}
NEGOTIATION_TRANSITIONS: Dict[NegotiationAction, Dict[NegotiationState, NegotiationState]] = {
    NegotiationAction.SUBMIT_BID: {
        NegotiationState.NONE: NegotiationState.BID_PENDING,
        NegotiationState.BID_PENDING: NegotiationState.BID_PENDING,
        NegotiationState.AMOUNT_NEGOTIATED: NegotiationState.AMOUNT_NEGOTIATED,
    },
    NegotiationAction.PROPOSE_AMOUNT: {
        NegotiationState.NONE: NegotiationState.AMOUNT_NEGOTIATED,
        NegotiationState.BID_PENDING: NegotiationState.AMOUNT_NEGOTIATED,
        NegotiationState.AMOUNT_NEGOTIATED: NegotiationState.AMOUNT_NEGOTIATED,
    },
    NegotiationAction.ACCEPT_BID: {
        NegotiationState.BID_PENDING: NegotiationState.AMOUNT_FINALIZED,
        NegotiationState.AMOUNT_NEGOTIATED: NegotiationState.AMOUNT_FINALIZED,
    },
    NegotiationAction.COUNTER_PROPOSE: {
        NegotiationState.BID_PENDING: NegotiationState.AMOUNT_NEGOTIATED,
        NegotiationState.AMOUNT_NEGOTIATED: NegotiationState.AMOUNT_NEGOTIATED,
    },
    NegotiationAction.REJECT_BID: {s: NegotiationState.REJECTED for s in NEGOTIATION_OPEN},
    NegotiationAction.ACCEPT_DEAL: {
        NegotiationState.BID_PENDING: NegotiationState.ACCEPTED,
        NegotiationState.AMOUNT_NEGOTIATED: NegotiationState.ACCEPTED,
    },
    NegotiationAction.REJECT_DEAL: {s: NegotiationState.REJECTED for s in NEGOTIATION_OPEN},
}


# ============================================================================
# SCRIPT / CONTENT REVIEW
# ============================================================================

class ScriptState(str, enum.Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REVISION_REQUESTED = "revision_requested"


class ContentState(str, enum.Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REVISION_REQUESTED = "revision_requested"
    LIVE = "live"


class ReviewAction(str, enum.Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    REVISION_REQUESTED = "revision_requested"


# States from which the creator may resubmit without re-checking upstream gates
SCRIPT_RESUBMITTABLE: FrozenSet[ScriptState] = frozenset({ScriptState.REJECTED, ScriptState.REVISION_REQUESTED})
CONTENT_RESUBMITTABLE: FrozenSet[ContentState] = frozenset({ContentState.REJECTED, ContentState.REVISION_REQUESTED})

# First submission (or an edit before review) needs the upstream gate
SCRIPT_SUBMITTABLE: FrozenSet[ScriptState] = frozenset({ScriptState.NONE, ScriptState.PENDING}) | SCRIPT_RESUBMITTABLE
CONTENT_SUBMITTABLE: FrozenSet[ContentState] = frozenset({ContentState.NONE, ContentState.PENDING}) | CONTENT_RESUBMITTABLE

SCRIPT_REVIEW_TRANSITIONS: Dict[ReviewAction, ScriptState] = {
    ReviewAction.APPROVED: ScriptState.APPROVED,
    ReviewAction.REJECTED: ScriptState.REJECTED,
    ReviewAction.REVISION_REQUESTED: ScriptState.REVISION_REQUESTED,
}

CONTENT_REVIEW_TRANSITIONS: Dict[ReviewAction, ContentState] = {
    ReviewAction.APPROVED: ContentState.APPROVED,
    ReviewAction.REJECTED: ContentState.REJECTED,
    ReviewAction.REVISION_REQUESTED: ContentState.REVISION_REQUESTED,
}


# ============================================================================
# CAMPAIGN AGGREGATE
# ============================================================================

class CampaignState(str, enum.Enum):
    SOURCING = "sourcing"
    CREATORS_SHORTLISTED = "creators_shortlisted"
    CREATORS_ARE_FINAL = "creators_are_final"
    BRIEF_PUBLISHED = "brief_published"
    IN_PRODUCTION = "in_production"
    COMPLETED = "completed"


# Derived only; never stored
AWAITING_BRIEF = "awaiting_brief"

CAMPAIGN_ORDER = [
    CampaignState.SOURCING,
    CampaignState.CREATORS_SHORTLISTED,
    CampaignState.CREATORS_ARE_FINAL,
    CampaignState.BRIEF_PUBLISHED,
    CampaignState.IN_PRODUCTION,
    CampaignState.COMPLETED,
]

CREATORS_FINAL_STATES: FrozenSet[CampaignState] = frozenset(CAMPAIGN_ORDER[CAMPAIGN_ORDER.index(CampaignState.CREATORS_ARE_FINAL):])


class SelectionStatus(str, enum.Enum):
    """Brand's verdict on a shortlisted creator."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# ============================================================================
# HELPERS
# ============================================================================

E = TypeVar("E", bound=enum.Enum)


def parse_state(enum_cls: Type[E], value, field: Optional[str] = None) -> E:
    """
    Coerce a raw value into a member of a closed state enum.
    Anything outside the known set is rejected at the boundary.
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        name = field or enum_cls.__name__
        raise ValidationError(f"Unknown {name} '{value}'; expected one of: {allowed}")


def next_negotiation_state(action: NegotiationAction, current: NegotiationState) -> Optional[NegotiationState]:
    """Target state for an action, or None when the table has no edge."""
    return NEGOTIATION_TRANSITIONS[action].get(current)


def campaign_view_state(state: CampaignState, brief_published: bool) -> str:
    """Aggregate state as shown to clients, including the derived awaiting_brief phase."""
    if state == CampaignState.CREATORS_ARE_FINAL and not brief_published:
        return AWAITING_BRIEF
    return state.value
