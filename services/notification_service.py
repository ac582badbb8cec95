# Notification Service for the Creator Campaign Platform
# Best-effort dispatcher: runs after a transition has committed and never
# undoes it. Failures are logged and dropped.

import logging
from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional, List
from enum import Enum

from config.app_config import NOTIFICATIONS_ENABLED
from database.models import User, UserTypeDB
from database.marketplace_models import Notification

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    SHORTLIST_UPLOADED = "shortlist_uploaded"
    CREATOR_SHORTLISTED = "creator_shortlisted"
    BRIEF_PUBLISHED = "brief_published"
    BID_SUBMITTED = "bid_submitted"
    AMOUNT_PROPOSED = "amount_proposed"
    BID_ACCEPTED = "bid_accepted"
    NEGOTIATION_REJECTED = "negotiation_rejected"
    DEAL_ACCEPTED = "deal_accepted"
    SCRIPT_SUBMITTED = "script_submitted"
    SCRIPT_REVIEWED = "script_reviewed"
    CONTENT_SUBMITTED = "content_submitted"
    CONTENT_REVIEWED = "content_reviewed"
    CONTENT_LIVE = "content_live"


class NotificationService:
    """
    Service for creating user notifications.
    Call it from workflow operations after the state change is committed.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type.value,
            title=title,
            message=message,
            data=data or {},
        )
        self.db.add(notification)
        return notification

    def dispatch(
        self,
        user_ids: List[str],
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict] = None,
    ) -> int:
        """
        Fire-and-forget: write one notification per recipient and commit.

        Returns:
            Number of notifications stored (0 when disabled or on failure)
        """
        if not NOTIFICATIONS_ENABLED or not user_ids:
            return 0
        try:
            for user_id in dict.fromkeys(user_ids):
                self.create(user_id=user_id, type=type, title=title, message=message, data=data)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Dropping '{type.value}' notification for {len(user_ids)} recipient(s)")
            return 0
        return len(set(user_ids))

    # =========================================================================
    # RECIPIENTS
    # =========================================================================

    def brand_owner_ids(self, brand_id: str) -> List[str]:
        rows = self.db.query(User.id).filter(
            User.brand_id == brand_id,
            User.user_type == UserTypeDB.BRAND_OWNER
        ).all()
        return [r[0] for r in rows]

    # =========================================================================
    # INBOX
    # =========================================================================

    def inbox(self, user_id: str, unread_only: bool = False):
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.read.is_(False))
        return query

    def mark_read(self, user_id: str, notification_id: Optional[str] = None) -> int:
        """Mark one notification, or the whole unread inbox, as read and commit."""
        query = self.inbox(user_id, unread_only=True)
        if notification_id is not None:
            query = query.filter(Notification.id == notification_id)
        count = query.update({"read": True, "read_at": datetime.utcnow()}, synchronize_session=False)
        self.db.commit()
        return count

    # =========================================================================
    # CAMPAIGN NOTIFICATION HELPERS
    # =========================================================================

    def notify_shortlist_uploaded(self, campaign, creator_ids: List[str]):
        """Tell the brand its shortlist is ready and each creator they were shortlisted."""
        self.dispatch(
            self.brand_owner_ids(campaign.brand_id),
            NotificationType.SHORTLIST_UPLOADED,
            "Creator shortlist ready",
            f"{len(creator_ids)} creators were shortlisted for '{campaign.name}'. Review them to continue.",
            {"campaign_id": campaign.id},
        )
        self.dispatch(
            creator_ids,
            NotificationType.CREATOR_SHORTLISTED,
            "You've been shortlisted",
            f"You were shortlisted for '{campaign.name}'.",
            {"campaign_id": campaign.id},
        )

    def notify_brief_published(self, campaign):
        creator_ids = [e.creator_id for e in campaign.retained_engagements]
        self.dispatch(
            creator_ids,
            NotificationType.BRIEF_PUBLISHED,
            "Campaign brief published",
            f"The brief for '{campaign.name}' is available.",
            {"campaign_id": campaign.id},
        )

    def notify_brand(self, engagement, type: NotificationType, title: str, message: str):
        campaign = engagement.campaign
        self.dispatch(
            self.brand_owner_ids(campaign.brand_id),
            type,
            title,
            message,
            {"campaign_id": campaign.id, "engagement_id": engagement.id},
        )

    def notify_creator(self, engagement, type: NotificationType, title: str, message: str):
        self.dispatch(
            [engagement.creator_id],
            type,
            title,
            message,
            {"campaign_id": engagement.campaign_id, "engagement_id": engagement.id},
        )

    def notify_review_outcome(self, engagement, subject: str, outcome: str, feedback: Optional[str] = None):
        """Tell the creator how their script or content was reviewed."""
        type = NotificationType.SCRIPT_REVIEWED if subject == "script" else NotificationType.CONTENT_REVIEWED
        message = f"Your {subject} for '{engagement.campaign.name}' was marked {outcome.replace('_', ' ')}."
        if feedback:
            message += f" Feedback: {feedback}"
        self.notify_creator(engagement, type, f"{subject.capitalize()} reviewed", message)


def get_notification_service(db: Session) -> NotificationService:
    """Factory function to get notification service instance."""
    return NotificationService(db)


@contextmanager
def notifications_after_commit(db: Session):
    """
    Best-effort block for notifying about a transition that has already
    committed. Anything raised inside (recipient lookups, message building,
    the insert itself) is logged and dropped, so the caller still returns
    the committed state.

    Usage:
        with notifications_after_commit(db) as notifications:
            notifications.notify_brand(engagement, ...)
    """
    try:
        yield get_notification_service(db)
    except Exception:
        db.rollback()
        logger.exception("Notification dispatch failed after commit; transition kept")
