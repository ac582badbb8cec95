"""Script and content sub-machines, batch reviews and automatic campaign advances."""

import pytest

from workflow import campaign_state, content_review, negotiation, script_review
from workflow.errors import Forbidden, PreconditionFailed, ValidationError
from workflow.states import CampaignState, ContentState, NEGOTIATION_FINALIZED, ScriptState
from workflow.views import engagement_snapshot

from tests.helpers import (
    agree_fee, approved_script, finalize_selection, live_content, publish_brief, ready_for_script, shortlist,
)


class TestScript:

    def test_needs_a_finalized_deal(self, db, world):
        engagement, engagement_b = shortlist(db, world)
        negotiation.submit_bid(db, engagement.id, world.creator_a, 5000)
        agree_fee(db, world, engagement_b, world.creator_b)
        finalize_selection(db, world)

        with pytest.raises(PreconditionFailed, match="deal not finalized"):
            script_review.submit_script(db, engagement.id, world.creator_a, "Draft")
        assert engagement.script_status == ScriptState.NONE

    def test_needs_final_creator_selection(self, db, world):
        engagement, _ = shortlist(db, world)
        agree_fee(db, world, engagement, world.creator_a)

        with pytest.raises(PreconditionFailed, match="creator selection not final"):
            script_review.submit_script(db, engagement.id, world.creator_a, "Draft")
        assert engagement.script_status == ScriptState.NONE

    def test_first_submission_starts_production(self, db, world):
        engagement, _ = ready_for_script(db, world)

        script_review.submit_script(db, engagement.id, world.creator_a, "Draft")

        assert engagement.script_status == ScriptState.PENDING
        assert engagement.script_submitted_at is not None
        assert world.campaign.state == CampaignState.IN_PRODUCTION

    def test_review_twice_reports_zero(self, db, world):
        engagement, _ = ready_for_script(db, world)
        script_review.submit_script(db, engagement.id, world.creator_a, "Draft")

        first = script_review.review_script(db, engagement.id, world.owner, "approved")
        second = script_review.review_script(db, engagement.id, world.employee, "rejected", "Too long")

        assert first.updated_count == 1
        assert second.updated_count == 0
        assert engagement.script_status == ScriptState.APPROVED
        assert engagement.script_feedback is None

    def test_revision_loop_then_content(self, db, world):
        engagement, _ = ready_for_script(db, world)
        script_review.submit_script(db, engagement.id, world.creator_a, "Draft")
        script_review.review_script(db, engagement.id, world.owner, "revision_requested", "Mention the battery")
        assert engagement.script_feedback == "Mention the battery"

        script_review.submit_script(db, engagement.id, world.creator_a, "Draft with battery")
        assert engagement.script_status == ScriptState.PENDING
        script_review.review_script(db, engagement.id, world.owner, "approved")

        content_review.upload_content(db, engagement.id, world.creator_a, "s3://videos/x1.mp4")
        assert engagement.content_status == ContentState.PENDING
        assert engagement_snapshot(engagement)["stage"] == "content_pending"

    def test_rejected_script_can_be_resubmitted(self, db, world):
        engagement, _ = ready_for_script(db, world)
        script_review.submit_script(db, engagement.id, world.creator_a, "Draft")
        script_review.review_script(db, engagement.id, world.owner, "rejected")

        script_review.submit_script(db, engagement.id, world.creator_a, "Second draft")
        assert engagement.script_status == ScriptState.PENDING

    def test_approved_script_is_final(self, db, world):
        engagement, _ = ready_for_script(db, world)
        approved_script(db, world, engagement, world.creator_a)

        with pytest.raises(PreconditionFailed, match="already approved"):
            script_review.submit_script(db, engagement.id, world.creator_a, "Changed my mind")

    def test_lanes(self, db, world):
        engagement, _ = ready_for_script(db, world)
        with pytest.raises(Forbidden):
            script_review.submit_script(db, engagement.id, world.creator_b, "Not mine")
        script_review.submit_script(db, engagement.id, world.creator_a, "Draft")
        with pytest.raises(Forbidden):
            script_review.review_script(db, engagement.id, world.creator_a, "approved")
        with pytest.raises(Forbidden):
            script_review.review_script(db, engagement.id, world.outsider, "approved")

    def test_unknown_review_action(self, db, world):
        engagement, _ = ready_for_script(db, world)
        script_review.submit_script(db, engagement.id, world.creator_a, "Draft")
        with pytest.raises(ValidationError):
            script_review.review_script(db, engagement.id, world.owner, "ok")


class TestContent:

    def test_blocked_while_script_pending(self, db, world):
        engagement, _ = ready_for_script(db, world)
        script_review.submit_script(db, engagement.id, world.creator_a, "Draft")

        with pytest.raises(PreconditionFailed, match="script not yet approved"):
            content_review.upload_content(db, engagement.id, world.creator_a, "s3://videos/x1.mp4")

    def test_uri_must_be_absolute(self, db, world):
        engagement, _ = ready_for_script(db, world)
        approved_script(db, world, engagement, world.creator_a)
        with pytest.raises(ValidationError):
            content_review.upload_content(db, engagement.id, world.creator_a, "x1.mp4")

    def test_revision_then_live(self, db, world):
        engagement, _ = ready_for_script(db, world)
        approved_script(db, world, engagement, world.creator_a)
        content_review.upload_content(db, engagement.id, world.creator_a, "s3://videos/x1.mp4")
        content_review.review_content(db, engagement.id, world.owner, "revision_requested", "Louder intro")
        content_review.upload_content(db, engagement.id, world.creator_a, "s3://videos/x1-v2.mp4")
        content_review.review_content(db, engagement.id, world.owner, "approved")

        content_review.go_live(db, engagement.id, world.creator_a, "https://youtube.com/watch?v=x1")

        assert engagement.content_status == ContentState.LIVE
        assert engagement.live_uri == "https://youtube.com/watch?v=x1"
        assert engagement.content_uri == "s3://videos/x1-v2.mp4"
        # live => script approved => negotiation finalized
        assert engagement.script_status == ScriptState.APPROVED
        assert engagement.negotiation_status in NEGOTIATION_FINALIZED

    def test_go_live_needs_approval(self, db, world):
        engagement, _ = ready_for_script(db, world)
        approved_script(db, world, engagement, world.creator_a)
        content_review.upload_content(db, engagement.id, world.creator_a, "s3://videos/x1.mp4")

        with pytest.raises(PreconditionFailed, match="content not approved"):
            content_review.go_live(db, engagement.id, world.creator_a, "https://youtube.com/watch?v=x1")

    def test_live_url_must_be_web(self, db, world):
        engagement, _ = ready_for_script(db, world)
        approved_script(db, world, engagement, world.creator_a)
        content_review.upload_content(db, engagement.id, world.creator_a, "s3://videos/x1.mp4")
        content_review.review_content(db, engagement.id, world.owner, "approved")

        with pytest.raises(ValidationError):
            content_review.go_live(db, engagement.id, world.creator_a, "s3://videos/x1.mp4")

    def test_approved_content_cannot_be_replaced(self, db, world):
        engagement, _ = ready_for_script(db, world)
        approved_script(db, world, engagement, world.creator_a)
        content_review.upload_content(db, engagement.id, world.creator_a, "s3://videos/x1.mp4")
        content_review.review_content(db, engagement.id, world.owner, "approved")

        with pytest.raises(PreconditionFailed, match="content already approved"):
            content_review.upload_content(db, engagement.id, world.creator_a, "s3://videos/other.mp4")

    def test_admin_cannot_go_live_for_creator(self, db, world):
        engagement, _ = ready_for_script(db, world)
        with pytest.raises(Forbidden):
            content_review.go_live(db, engagement.id, world.admin, "https://youtube.com/watch?v=x1")


class TestCampaignCompletion:

    def test_completes_when_every_retained_engagement_is_finished(self, db, world):
        engagement_a, engagement_b = ready_for_script(db, world)

        live_content(db, world, engagement_a, world.creator_a)
        assert world.campaign.state == CampaignState.IN_PRODUCTION

        live_content(db, world, engagement_b, world.creator_b)
        assert world.campaign.state == CampaignState.COMPLETED
        assert world.campaign.completed_at is not None

    def test_scripts_before_the_brief_still_reach_production(self, db, world):
        engagement_a, engagement_b = shortlist(db, world)
        agree_fee(db, world, engagement_a, world.creator_a, 5000)
        agree_fee(db, world, engagement_b, world.creator_b, 4000)
        finalize_selection(db, world)
        script_review.submit_script(db, engagement_a.id, world.creator_a, "Draft A")
        script_review.submit_script(db, engagement_b.id, world.creator_b, "Draft B")
        assert world.campaign.state == CampaignState.CREATORS_ARE_FINAL

        publish_brief(db, world)
        assert world.campaign.state == CampaignState.IN_PRODUCTION
        assert world.campaign.production_started_at is not None

        live_content(db, world, engagement_a, world.creator_a)
        live_content(db, world, engagement_b, world.creator_b)
        assert world.campaign.state == CampaignState.COMPLETED

    def test_everything_live_before_the_brief_completes_on_publish(self, db, world):
        engagement_a, engagement_b = shortlist(db, world)
        agree_fee(db, world, engagement_a, world.creator_a, 5000)
        agree_fee(db, world, engagement_b, world.creator_b, 4000)
        finalize_selection(db, world)
        live_content(db, world, engagement_a, world.creator_a)
        live_content(db, world, engagement_b, world.creator_b)
        assert world.campaign.state == CampaignState.CREATORS_ARE_FINAL

        publish_brief(db, world)

        assert world.campaign.state == CampaignState.COMPLETED
        assert world.campaign.brief_published_at is not None


class TestRejectedCreator:

    def _drop_creator_a(self, db, world):
        engagement_a, engagement_b = shortlist(db, world)
        agree_fee(db, world, engagement_a, world.creator_a, 5000)
        agree_fee(db, world, engagement_b, world.creator_b, 4000)
        campaign_state.respond_to_creators(db, world.campaign.id, world.owner, [
            {"creator_id": world.creator_a.id, "status": "rejected"},
        ])
        finalize_selection(db, world)
        publish_brief(db, world)
        return engagement_a, engagement_b

    def test_cannot_submit_a_script(self, db, world):
        engagement_a, _ = self._drop_creator_a(db, world)

        with pytest.raises(PreconditionFailed, match="not selected"):
            script_review.submit_script(db, engagement_a.id, world.creator_a, "Draft")
        assert engagement_a.script_status == ScriptState.NONE

    def test_cannot_upload_or_go_live(self, db, world):
        engagement_a, _ = self._drop_creator_a(db, world)

        with pytest.raises(PreconditionFailed, match="not selected"):
            content_review.upload_content(db, engagement_a.id, world.creator_a, "s3://videos/x1.mp4")
        with pytest.raises(PreconditionFailed, match="not selected"):
            content_review.go_live(db, engagement_a.id, world.creator_a, "https://youtube.com/watch?v=x1")
        assert engagement_a.content_status == ContentState.NONE

    def test_campaign_completes_without_the_dropped_creator(self, db, world):
        _, engagement_b = self._drop_creator_a(db, world)

        live_content(db, world, engagement_b, world.creator_b)

        assert world.campaign.state == CampaignState.COMPLETED



class TestBatchReview:

    def test_counts_and_failures(self, db, world):
        engagement_a, engagement_b = ready_for_script(db, world)
        script_review.submit_script(db, engagement_a.id, world.creator_a, "Draft A")
        script_review.submit_script(db, engagement_b.id, world.creator_b, "Draft B")
        script_review.review_script(db, engagement_b.id, world.owner, "approved")

        result = script_review.review_scripts_batch(db, world.campaign.id, world.owner, [
            {"engagement_id": engagement_a.id, "action": "revision_requested", "feedback": "Shorter"},
            {"engagement_id": engagement_b.id, "action": "rejected"},
            {"engagement_id": "missing", "action": "approved"},
            {"engagement_id": engagement_a.id, "action": "bogus"},
        ])

        assert result.revision_requested_count == 1
        assert result.rejected_count == 0
        assert result.skipped_count == 1
        assert result.updated_count == 1
        assert [f["error"] for f in result.failures] == ["not_found", "validation_error"]
        assert engagement_b.script_status == ScriptState.APPROVED

    def test_content_batch(self, db, world):
        engagement_a, engagement_b = ready_for_script(db, world)
        for engagement, creator in ((engagement_a, world.creator_a), (engagement_b, world.creator_b)):
            approved_script(db, world, engagement, creator)
            content_review.upload_content(db, engagement.id, creator, "s3://videos/clip.mp4")

        result = content_review.review_content_batch(db, world.campaign.id, world.employee, [
            {"engagement_id": engagement_a.id, "action": "approved"},
            {"engagement_id": engagement_b.id, "action": "rejected", "feedback": "Wrong product"},
        ])

        assert (result.approved_count, result.rejected_count) == (1, 1)
        assert engagement_b.content_feedback == "Wrong product"
