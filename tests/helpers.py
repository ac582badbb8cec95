"""Shortcuts that walk a campaign to a given phase through the real operations."""

from workflow import campaign_state, content_review, negotiation, script_review
from workflow.store import find_engagement


def shortlist(db, world, creators=None):
    creators = creators or [world.creator_a, world.creator_b]
    campaign_state.upload_creator_shortlist(db, world.campaign.id, world.admin, [c.id for c in creators])
    return [find_engagement(db, world.campaign.id, c.id) for c in creators]


def agree_fee(db, world, engagement, creator, amount=5000):
    """Creator bids and the brand accepts the bid as is."""
    negotiation.submit_bid(db, engagement.id, creator, amount)
    return negotiation.accept_bid(db, engagement.id, world.owner)


def finalize_selection(db, world):
    campaign_state.finalize_creator_amounts(db, world.campaign.id, world.owner)
    return campaign_state.submit_creator_selection(db, world.campaign.id, world.owner)


def publish_brief(db, world):
    return campaign_state.upload_brief(db, world.campaign.id, world.owner, {
        "video_title": "Unboxing the X1",
        "primary_focus": "Noise cancelling",
        "cta": "Link in description",
    })


def ready_for_script(db, world):
    """Both default creators shortlisted with agreed fees, selection final, brief published."""
    engagement_a, engagement_b = shortlist(db, world)
    agree_fee(db, world, engagement_a, world.creator_a, 5000)
    agree_fee(db, world, engagement_b, world.creator_b, 4000)
    finalize_selection(db, world)
    publish_brief(db, world)
    return engagement_a, engagement_b


def approved_script(db, world, engagement, creator):
    script_review.submit_script(db, engagement.id, creator, "Intro, demo, call to action")
    script_review.review_script(db, engagement.id, world.owner, "approved")
    return engagement


def live_content(db, world, engagement, creator):
    approved_script(db, world, engagement, creator)
    content_review.upload_content(db, engagement.id, creator, "s3://videos/x1.mp4")
    content_review.review_content(db, engagement.id, world.owner, "approved")
    return content_review.go_live(db, engagement.id, creator, "https://youtube.com/watch?v=x1")
