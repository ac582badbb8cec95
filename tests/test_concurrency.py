"""
Racing actors on one engagement or campaign.

`other_db` is a second session on the same database. It loads its snapshot
first, then the first session commits a competing transition.
"""

import pytest

from database.models import User
from workflow import campaign_state, negotiation, script_review
from workflow.errors import StaleState
from workflow.states import CampaignState, NegotiationState, ScriptState, SelectionStatus
from workflow.store import get_campaign, get_engagement

from tests.helpers import agree_fee, ready_for_script, shortlist


def _load(session, user):
    return session.query(User).filter(User.id == user.id).one()


class TestNegotiationRace:

    def test_accept_and_reject_deal(self, db, other_db, world):
        engagement, _ = shortlist(db, world)
        negotiation.propose_amount(db, engagement.id, world.owner, 3000)

        stale = get_engagement(other_db, engagement.id)
        assert stale.negotiation_status == NegotiationState.AMOUNT_NEGOTIATED

        negotiation.accept_deal(db, engagement.id, world.creator_a)

        with pytest.raises(StaleState):
            negotiation.reject_deal(other_db, engagement.id, _load(other_db, world.creator_a))

        db.expire_all()
        assert get_engagement(db, engagement.id).negotiation_status == NegotiationState.ACCEPTED

    def test_bid_against_brand_acceptance(self, db, other_db, world):
        engagement, _ = shortlist(db, world)
        negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)

        stale = get_engagement(other_db, engagement.id)
        assert stale.negotiation_status == NegotiationState.BID_PENDING
        negotiation.accept_bid(db, engagement.id, world.owner)

        with pytest.raises(StaleState):
            negotiation.submit_bid(other_db, engagement.id, _load(other_db, world.creator_a), 4000)

        db.expire_all()
        refreshed = get_engagement(db, engagement.id)
        assert refreshed.final_amount == 5000
        assert refreshed.negotiation_status == NegotiationState.AMOUNT_FINALIZED


class TestReviewRace:

    def test_losing_reviewer_gets_a_no_op(self, db, other_db, world):
        engagement, _ = ready_for_script(db, world)
        script_review.submit_script(db, engagement.id, world.creator_a, "Draft")

        stale = get_engagement(other_db, engagement.id)
        assert stale.script_status == ScriptState.PENDING
        script_review.review_script(db, engagement.id, world.owner, "approved")

        outcome = script_review.review_script(other_db, engagement.id, _load(other_db, world.employee), "rejected")

        assert outcome.updated_count == 0
        db.expire_all()
        assert get_engagement(db, engagement.id).script_status == ScriptState.APPROVED


class TestSelectionRace:

    def test_concurrent_submissions_both_succeed(self, db, other_db, world):
        engagement, _ = shortlist(db, world)
        agree_fee(db, world, engagement, world.creator_a)
        campaign_state.finalize_creator_amounts(db, world.campaign.id, world.owner)

        stale = get_campaign(other_db, world.campaign.id)
        assert stale.retained_engagements
        first = campaign_state.submit_creator_selection(db, world.campaign.id, world.owner)
        second = campaign_state.submit_creator_selection(other_db, world.campaign.id, _load(other_db, world.owner))

        assert (first.updated_count, second.updated_count) == (1, 0)

    def test_shortlist_review_loses_to_selection_commit(self, db, other_db, world):
        engagement_a, engagement_b = shortlist(db, world)
        agree_fee(db, world, engagement_a, world.creator_a)
        campaign_state.finalize_creator_amounts(db, world.campaign.id, world.owner)

        stale = get_campaign(other_db, world.campaign.id)
        assert stale.state == CampaignState.CREATORS_SHORTLISTED
        campaign_state.submit_creator_selection(db, world.campaign.id, world.owner)

        with pytest.raises(StaleState):
            campaign_state.respond_to_creators(other_db, world.campaign.id, _load(other_db, world.owner), [
                {"creator_id": world.creator_b.id, "status": "rejected"},
            ])

        db.expire_all()
        assert get_engagement(db, engagement_b.id).selection_status == SelectionStatus.PENDING
        assert get_campaign(db, world.campaign.id).state == CampaignState.CREATORS_ARE_FINAL
