# Authentication and Authorization Dependencies for the Creator Campaign Platform
# Coarse role gates for routers; per-record lane checks live in auth.lanes

from fastapi import HTTPException, status, Depends

from database.models import User
from auth.roles import UserType, Permission, has_any_permission
from auth.dependencies import get_current_user
from auth.lanes import get_user_type


class AuthError(HTTPException):
    """Custom exception for authentication/authorization errors."""

    def __init__(self, detail: str, status_code: int = status.HTTP_403_FORBIDDEN):
        headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
        super().__init__(status_code=status_code, detail=detail, headers=headers)


def require_user_type(*allowed_types: UserType):
    """
    Dependency that requires the user to be one of the specified types.

    Usage:
        @router.post("/bid")
        async def bid(user: User = Depends(require_user_type(UserType.CREATOR))):
            ...
    """
    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        user_type = get_user_type(current_user)
        if user_type not in allowed_types:
            allowed_names = ", ".join(t.value for t in allowed_types)
            raise AuthError(
                detail=f"This endpoint requires user type: {allowed_names}",
                status_code=status.HTTP_403_FORBIDDEN
            )
        return current_user

    return dependency


def require_permission(*permissions: Permission):
    """
    Dependency that requires the user to hold at least one of the permissions.

    Usage:
        @router.post("/script/review")
        async def review(user: User = Depends(require_permission(Permission.REVIEW_SCRIPT))):
            ...
    """
    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_any_permission(get_user_type(current_user), list(permissions)):
            raise AuthError(
                detail="You don't have permission to perform this action",
                status_code=status.HTTP_403_FORBIDDEN
            )
        return current_user

    return dependency


def require_admin():
    """Dependency that requires the user to be an admin."""
    return require_user_type(UserType.ADMIN)
