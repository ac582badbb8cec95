# Authentication Dependencies for the Creator Campaign Platform
# Resolves the bearer JWT issued by the identity provider to a User row

from fastapi import Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import jwt, JWTError
from datetime import datetime, timedelta
from typing import Optional
from pydantic import BaseModel
import logging

from config.app_config import JWT_SECRET_KEY, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from database.config import get_db
from database.models import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    email: Optional[str] = None


def create_access_token(email: str, expires_minutes: Optional[int] = None) -> str:
    """Mint a token the same way the identity provider does (used by tooling and tests)."""
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes or ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode({"sub": email, "email": email, "exp": expire}, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[TokenData]:
    """Decode and validate JWT token."""
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        return None
    email: str = payload.get("email") or payload.get("sub")
    if email is None:
        return None
    return TokenData(email=email)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Validate JWT token and return current user.
    This is the core authentication dependency.
    """
    from auth.decorators import AuthError  # Import here to avoid circular

    if credentials is None:
        raise AuthError(
            detail="Not authenticated",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    token_data = decode_access_token(credentials.credentials)
    if token_data is None:
        raise AuthError(
            detail="Invalid authentication credentials",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    user = db.query(User).filter(User.email == token_data.email).first()
    if user is None or not user.is_active:
        raise AuthError(
            detail="User not found",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return user
