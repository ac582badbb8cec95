# Notifications Router for the Creator Campaign Platform
# Reads the notification rows written by services.notification_service

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import desc

from database.config import get_db
from database.models import User
from database.marketplace_models import Notification
from auth.dependencies import get_current_user
from services.notification_service import get_notification_service
from workflow.errors import NotFound

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _notification_to_response(n: Notification) -> dict:
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "data": n.data or {},
        "read": bool(n.read),
        "read_at": n.read_at.isoformat() if n.read_at else None,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


@router.get("", response_model=dict)
async def get_notifications(
    unread_only: bool = Query(False, description="Only return unread notifications"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Newest first, paginated."""
    inbox = get_notification_service(db).inbox(current_user.id, unread_only)
    total = inbox.count()
    rows = inbox.order_by(desc(Notification.created_at)).offset((page - 1) * limit).limit(limit).all()
    return {
        "notifications": [_notification_to_response(n) for n in rows],
        "pagination": {"page": page, "limit": limit, "total": total},
    }


@router.get("/unread-count", response_model=dict)
async def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"unread_count": get_notification_service(db).inbox(current_user.id, unread_only=True).count()}


@router.post("/{notification_id}/read", response_model=dict)
async def mark_as_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = get_notification_service(db)
    if not service.inbox(current_user.id).filter(Notification.id == notification_id).count():
        raise NotFound("Notification not found")
    return {"updated_count": service.mark_read(current_user.id, notification_id)}


@router.post("/read-all", response_model=dict)
async def mark_all_as_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"updated_count": get_notification_service(db).mark_read(current_user.id)}
