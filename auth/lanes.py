# Ownership lanes
# The brand side writes proposals and reviews; the creator side writes bids,
# submissions and live links. Nobody writes outside their lane.

from auth.roles import UserType, Permission, BRAND_TYPES, has_permission
from workflow.errors import Forbidden


def get_user_type(user) -> UserType:
    """Extract UserType from a User row, tolerating raw strings."""
    val = user.user_type.value if hasattr(user.user_type, "value") else user.user_type
    try:
        return UserType(str(val).lower())
    except ValueError:
        raise Forbidden(f"Unknown user type '{val}'")


def ensure_permission(user, permission: Permission):
    """Role-level check only; no record ownership."""
    user_type = get_user_type(user)
    if not has_permission(user_type, permission):
        raise Forbidden(f"Role '{user_type.value}' may not {permission.value.replace('_', ' ')}")
    return user_type


def ensure_admin(user, permission: Permission):
    user_type = ensure_permission(user, permission)
    if user_type != UserType.ADMIN:
        raise Forbidden("Admin access required")


def ensure_brand_lane(user, campaign, permission: Permission):
    """Caller must belong to the campaign's brand (or be an admin)."""
    user_type = ensure_permission(user, permission)
    if user_type == UserType.ADMIN:
        return
    if user_type not in BRAND_TYPES or user.brand_id != campaign.brand_id:
        raise Forbidden("Only members of the campaign's brand can do this")


def ensure_creator_lane(user, engagement, permission: Permission):
    """Caller must be the creator the engagement belongs to."""
    ensure_permission(user, permission)
    if engagement.creator_id != user.id:
        raise Forbidden("Only the engaged creator can do this")


def can_view_engagement(user, engagement) -> bool:
    """Creators see only their own engagement; brand members see their campaigns'."""
    if engagement.creator_id == user.id:
        return True
    if get_user_type(user) == UserType.CREATOR:
        return False
    return can_view_campaign(user, engagement.campaign)


def can_view_campaign(user, campaign) -> bool:
    user_type = get_user_type(user)
    if user_type == UserType.ADMIN:
        return True
    if user_type in BRAND_TYPES:
        return user.brand_id == campaign.brand_id
    return any(e.creator_id == user.id for e in campaign.engagements)
