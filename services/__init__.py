# Services Module for the Creator Campaign Platform
# Contains business logic services

from services.notification_service import (
    NotificationService, NotificationType, get_notification_service, notifications_after_commit,
)

__all__ = [
    'NotificationService',
    'NotificationType',
    'get_notification_service',
    'notifications_after_commit',
]
