"""Transition tables, closed enums and role permissions."""

import pytest

from auth.roles import Permission, UserType, has_permission
from workflow.errors import ValidationError
from workflow.states import (
    AWAITING_BRIEF, NEGOTIATION_TERMINAL, NEGOTIATION_TRANSITIONS,
    CampaignState, NegotiationAction, NegotiationState, ScriptState,
    campaign_view_state, next_negotiation_state, parse_state,
)


class TestNegotiationTable:

    def test_opening_bid_moves_to_bid_pending(self):
        assert next_negotiation_state(NegotiationAction.SUBMIT_BID, NegotiationState.NONE) == NegotiationState.BID_PENDING

    def test_later_bids_keep_the_current_state(self):
        assert next_negotiation_state(NegotiationAction.SUBMIT_BID, NegotiationState.BID_PENDING) == NegotiationState.BID_PENDING
        assert next_negotiation_state(NegotiationAction.SUBMIT_BID, NegotiationState.AMOUNT_NEGOTIATED) == NegotiationState.AMOUNT_NEGOTIATED

    def test_no_action_leaves_a_terminal_state(self):
        for action, edges in NEGOTIATION_TRANSITIONS.items():
            for state in NEGOTIATION_TERMINAL:
                assert state not in edges, f"{action.value} must not leave {state.value}"

    def test_accept_deal_needs_an_open_negotiation(self):
        assert next_negotiation_state(NegotiationAction.ACCEPT_DEAL, NegotiationState.NONE) is None
        assert next_negotiation_state(NegotiationAction.ACCEPT_DEAL, NegotiationState.AMOUNT_NEGOTIATED) == NegotiationState.ACCEPTED


class TestParseState:

    def test_accepts_members_and_raw_values(self):
        assert parse_state(ScriptState, "approved") == ScriptState.APPROVED
        assert parse_state(ScriptState, ScriptState.PENDING) == ScriptState.PENDING

    def test_rejects_unknown_strings(self):
        with pytest.raises(ValidationError, match="Unknown script state 'aproved'"):
            parse_state(ScriptState, "aproved", "script state")


class TestCampaignViewState:

    def test_awaiting_brief_is_derived(self):
        assert campaign_view_state(CampaignState.CREATORS_ARE_FINAL, False) == AWAITING_BRIEF
        assert campaign_view_state(CampaignState.CREATORS_ARE_FINAL, True) == "creators_are_final"
        assert campaign_view_state(CampaignState.IN_PRODUCTION, True) == "in_production"


class TestRolePermissions:

    def test_brand_employee_cannot_commit_the_selection(self):
        assert has_permission(UserType.BRAND_EMP, Permission.REVIEW_SCRIPT)
        assert not has_permission(UserType.BRAND_EMP, Permission.FINALIZE_SELECTION)
        assert not has_permission(UserType.BRAND_EMP, Permission.CREATE_CAMPAIGN)

    def test_admin_never_writes_the_creator_lane(self):
        for permission in (Permission.SUBMIT_BID, Permission.SUBMIT_SCRIPT, Permission.UPLOAD_CONTENT, Permission.GO_LIVE):
            assert not has_permission(UserType.ADMIN, permission)
        assert has_permission(UserType.ADMIN, Permission.UPLOAD_SHORTLIST)

    def test_creator_cannot_review(self):
        assert not has_permission(UserType.CREATOR, Permission.REVIEW_SCRIPT)
        assert not has_permission(UserType.CREATOR, Permission.PROPOSE_AMOUNT)
