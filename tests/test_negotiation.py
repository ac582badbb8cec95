"""Negotiation sub-machine through the workflow operations."""

from datetime import datetime, timedelta

import pytest

from database.marketplace_models import Campaign, Notification
from services.notification_service import NotificationService
from workflow import negotiation, script_review
from workflow.errors import Forbidden, PreconditionFailed, StaleState, ValidationError
from workflow.states import NegotiationState, ScriptState
from workflow.store import get_engagement

from tests.helpers import shortlist


class TestCreatorBids:

    def test_opening_bid(self, db, world):
        engagement, _ = shortlist(db, world)

        negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)

        assert engagement.negotiation_status == NegotiationState.BID_PENDING
        assert engagement.creator_bid_amount == 5000
        assert engagement.bid_rounds == 1
        assert engagement.version == 2

    def test_new_bid_clears_the_brand_amount(self, db, world):
        engagement, _ = shortlist(db, world)
        negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)
        negotiation.counter_propose(db, engagement.id, world.owner, 4000)
        assert engagement.final_amount == 4000

        negotiation.submit_bid(db, engagement.id, world.creator_a, 4500)

        assert engagement.final_amount is None
        assert engagement.creator_bid_amount == 4500
        assert engagement.negotiation_status == NegotiationState.AMOUNT_NEGOTIATED

    @pytest.mark.parametrize("amount", [0, -100, True, 12.5])
    def test_amount_must_be_a_positive_whole_number(self, db, world, amount):
        engagement, _ = shortlist(db, world)
        with pytest.raises(ValidationError):
            negotiation.submit_bid(db, engagement.id, world.creator_a, amount)
        assert engagement.negotiation_status == NegotiationState.NONE

    def test_round_limit(self, db, world):
        engagement, _ = shortlist(db, world)
        for amount in (6000, 5500, 5200):
            negotiation.submit_bid(db, engagement.id, world.creator_a, amount)

        with pytest.raises(PreconditionFailed, match="round limit"):
            negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)

    def test_deadline(self, db, world):
        engagement, _ = shortlist(db, world)
        db.query(Campaign).filter(Campaign.id == world.campaign.id).update(
            {"negotiation_deadline": datetime.utcnow() - timedelta(days=1)}
        )
        db.commit()

        with pytest.raises(PreconditionFailed, match="deadline has passed"):
            negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)

    def test_only_the_engaged_creator_can_bid(self, db, world):
        engagement, _ = shortlist(db, world)
        for actor in (world.creator_b, world.owner, world.admin):
            with pytest.raises(Forbidden):
                negotiation.submit_bid(db, engagement.id, actor, 5000)

    def test_rejected_from_shortlist_cannot_bid(self, db, world):
        from workflow.campaign_state import respond_to_creators
        engagement, _ = shortlist(db, world)
        respond_to_creators(db, world.campaign.id, world.owner, [
            {"creator_id": world.creator_a.id, "status": "rejected", "comment": "Off brand"},
        ])

        with pytest.raises(PreconditionFailed, match="not selected"):
            negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)


class TestBrandResponses:

    def test_bid_counter_accept_deal(self, db, world):
        engagement, _ = shortlist(db, world)

        negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)
        negotiation.counter_propose(db, engagement.id, world.owner, 4000)
        negotiation.accept_deal(db, engagement.id, world.creator_a)

        assert engagement.final_amount == 4000
        assert engagement.negotiation_status == NegotiationState.ACCEPTED
        # Script is now unblocked
        script_review.submit_script(db, engagement.id, world.creator_a, "My script")
        assert engagement.script_status == ScriptState.PENDING

    def test_accept_bid_copies_the_bid(self, db, world):
        engagement, _ = shortlist(db, world)
        negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)

        negotiation.accept_bid(db, engagement.id, world.employee)

        assert engagement.final_amount == 5000
        assert engagement.negotiation_status == NegotiationState.AMOUNT_FINALIZED

    def test_accept_bid_without_a_bid(self, db, world):
        engagement, _ = shortlist(db, world)
        negotiation.propose_amount(db, engagement.id, world.owner, 3000)

        with pytest.raises(PreconditionFailed, match="has not submitted a bid"):
            negotiation.accept_bid(db, engagement.id, world.owner)

    def test_default_proposal_prices_at_cpv_times_views(self, db, world):
        engagement, _ = shortlist(db, world)

        negotiation.propose_amount(db, engagement.id, world.owner)

        # cost_per_view 2 x avg_views 20000
        assert engagement.brand_proposed_amount == 40000
        assert engagement.final_amount == 40000
        assert engagement.negotiation_status == NegotiationState.AMOUNT_NEGOTIATED

    def test_rival_brand_cannot_propose(self, db, world):
        engagement, _ = shortlist(db, world)
        with pytest.raises(Forbidden):
            negotiation.propose_amount(db, engagement.id, world.outsider, 3000)

    def test_creator_cannot_set_the_final_amount(self, db, world):
        engagement, _ = shortlist(db, world)
        negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)
        with pytest.raises(Forbidden):
            negotiation.accept_bid(db, engagement.id, world.creator_a)

    def test_respond_to_bid_dispatch(self, db, world):
        engagement_a, engagement_b = shortlist(db, world)
        negotiation.submit_bid(db, engagement_a.id, world.creator_a, 5000)
        negotiation.submit_bid(db, engagement_b.id, world.creator_b, 7000)

        negotiation.respond_to_bid(db, engagement_a.id, world.owner, "accept", counter_amount=4500)
        negotiation.respond_to_bid(db, engagement_b.id, world.owner, "reject")

        assert engagement_a.negotiation_status == NegotiationState.AMOUNT_NEGOTIATED
        assert engagement_a.final_amount == 4500
        assert engagement_b.negotiation_status == NegotiationState.REJECTED

        with pytest.raises(ValidationError):
            negotiation.respond_to_bid(db, engagement_a.id, world.owner, "maybe")


class TestCreatorDecision:

    def test_accept_deal_needs_a_brand_amount(self, db, world):
        engagement, _ = shortlist(db, world)
        negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)

        with pytest.raises(PreconditionFailed, match="no brand amount"):
            negotiation.accept_deal(db, engagement.id, world.creator_a)

    def test_accept_deal_before_any_negotiation(self, db, world):
        engagement, _ = shortlist(db, world)
        with pytest.raises(PreconditionFailed, match="while negotiation is none"):
            negotiation.accept_deal(db, engagement.id, world.creator_a)

    def test_rejection_is_terminal(self, db, world):
        engagement, _ = shortlist(db, world)
        negotiation.propose_amount(db, engagement.id, world.owner, 3000)
        negotiation.reject_deal(db, engagement.id, world.creator_a)

        assert engagement.negotiation_status == NegotiationState.REJECTED
        with pytest.raises(PreconditionFailed, match="while negotiation is rejected"):
            negotiation.submit_bid(db, engagement.id, world.creator_a, 2000)
        with pytest.raises(PreconditionFailed):
            negotiation.propose_amount(db, engagement.id, world.owner, 3500)

    def test_expected_version_mismatch(self, db, world):
        engagement, _ = shortlist(db, world)
        negotiation.propose_amount(db, engagement.id, world.owner, 3000)

        with pytest.raises(StaleState):
            negotiation.accept_deal(db, engagement.id, world.creator_a, expected_version=1)
        assert engagement.negotiation_status == NegotiationState.AMOUNT_NEGOTIATED


class TestHistory:

    def test_every_move_is_recorded(self, db, world):
        engagement, _ = shortlist(db, world)
        negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)
        negotiation.counter_propose(db, engagement.id, world.owner, 4000)
        negotiation.accept_deal(db, engagement.id, world.creator_a)

        events = negotiation.negotiation_history(db, engagement.id, world.owner)

        assert [e.event for e in events] == ["bid_submitted", "counter_proposed", "deal_accepted"]
        assert [e.amount for e in events] == [5000, 4000, 4000]
        assert events[-1].to_state == "accepted"

    def test_other_creators_cannot_read_it(self, db, world):
        engagement, _ = shortlist(db, world)
        negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)

        with pytest.raises(Forbidden):
            negotiation.negotiation_history(db, engagement.id, world.creator_b)
        assert len(negotiation.negotiation_history(db, engagement.id, world.creator_a)) == 1


class TestNotificationFailures:

    @staticmethod
    def _fail(*args, **kwargs):
        raise RuntimeError("dispatcher down")

    def test_bid_stands_when_the_dispatcher_fails(self, db, world, monkeypatch):
        engagement, _ = shortlist(db, world)
        monkeypatch.setattr(NotificationService, "create", self._fail)

        returned = negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)

        assert returned.id == engagement.id
        db.expire_all()
        stored = get_engagement(db, engagement.id)
        assert stored.negotiation_status == NegotiationState.BID_PENDING
        assert stored.bid_rounds == 1
        assert db.query(Notification).filter(Notification.type == "bid_submitted").count() == 0

    def test_recipient_lookup_failure_is_dropped(self, db, world, monkeypatch):
        engagement, _ = shortlist(db, world)
        negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)
        monkeypatch.setattr(NotificationService, "brand_owner_ids", self._fail)

        negotiation.counter_propose(db, engagement.id, world.owner, 4000)
        negotiation.accept_deal(db, engagement.id, world.creator_a)

        db.expire_all()
        assert get_engagement(db, engagement.id).negotiation_status == NegotiationState.ACCEPTED
