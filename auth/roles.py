# Role-Based Access Control for the Creator Campaign Platform
# This module defines user roles and the permissions each role holds

from enum import Enum
from typing import List, Set


class UserType(str, Enum):
    """User types issued by the identity provider."""
    ADMIN = "admin"
    BRAND_OWNER = "brand_owner"
    BRAND_EMP = "brand_emp"
    CREATOR = "creator"


BRAND_TYPES = (UserType.BRAND_OWNER, UserType.BRAND_EMP)


class Permission(str, Enum):
    """Fine-grained permissions for the platform."""

    # Brand lane
    CREATE_CAMPAIGN = "create_campaign"
    ARCHIVE_CAMPAIGN = "archive_campaign"
    VIEW_CAMPAIGN = "view_campaign"
    REVIEW_SHORTLIST = "review_shortlist"
    PROPOSE_AMOUNT = "propose_amount"
    RESPOND_TO_BID = "respond_to_bid"
    FINALIZE_SELECTION = "finalize_selection"
    UPLOAD_BRIEF = "upload_brief"
    REVIEW_SCRIPT = "review_script"
    REVIEW_CONTENT = "review_content"

    # Creator lane
    SUBMIT_BID = "submit_bid"
    RESPOND_TO_DEAL = "respond_to_deal"
    SUBMIT_SCRIPT = "submit_script"
    UPLOAD_CONTENT = "upload_content"
    GO_LIVE = "go_live"
    VIEW_BRIEF = "view_brief"

    # Admin
    UPLOAD_SHORTLIST = "upload_shortlist"
    VIEW_ALL_CAMPAIGNS = "view_all_campaigns"


_BRAND_EMP_PERMISSIONS = {
    Permission.VIEW_CAMPAIGN,
    Permission.REVIEW_SHORTLIST,
    Permission.PROPOSE_AMOUNT,
    Permission.RESPOND_TO_BID,
    Permission.UPLOAD_BRIEF,
    Permission.REVIEW_SCRIPT,
    Permission.REVIEW_CONTENT,
    Permission.VIEW_BRIEF,
}

_CREATOR_PERMISSIONS = {
    Permission.SUBMIT_BID,
    Permission.RESPOND_TO_DEAL,
    Permission.SUBMIT_SCRIPT,
    Permission.UPLOAD_CONTENT,
    Permission.GO_LIVE,
    Permission.VIEW_BRIEF,
}


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserType, Set[Permission]] = {
    # Employees work the day-to-day reviews; commitments stay with the owner
    UserType.BRAND_EMP: set(_BRAND_EMP_PERMISSIONS),

    UserType.BRAND_OWNER: _BRAND_EMP_PERMISSIONS | {
        Permission.CREATE_CAMPAIGN,
        Permission.ARCHIVE_CAMPAIGN,
        Permission.FINALIZE_SELECTION,
    },

    UserType.CREATOR: set(_CREATOR_PERMISSIONS),

    # Admin can act for the brand side but never writes the creator lane
    UserType.ADMIN: {
        *(p for p in Permission.__members__.values() if p not in _CREATOR_PERMISSIONS),
        Permission.VIEW_BRIEF,
    },
}


def get_permissions_for_role(user_type: UserType) -> Set[Permission]:
    """Get all permissions for a given user type."""
    return ROLE_PERMISSIONS.get(user_type, set())


def has_permission(user_type: UserType, permission: Permission) -> bool:
    """Check if a user type has a specific permission."""
    return permission in get_permissions_for_role(user_type)


def has_any_permission(user_type: UserType, permissions: List[Permission]) -> bool:
    """Check if a user type has any of the given permissions."""
    user_permissions = get_permissions_for_role(user_type)
    return any(p in user_permissions for p in permissions)
