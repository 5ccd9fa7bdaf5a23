"""Authentication dependencies for FastAPI"""

from authlib.jose.errors import InvalidTokenError
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from competition_manager.auth.jwt_utils import jwt_utils
from competition_manager.auth.models import User, is_admin
from competition_manager.logging_config import get_logger

# auto_error=False so a missing header yields 401 rather than 403
security = HTTPBearer(auto_error=False)

logger = get_logger(__name__)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> User:
    """
    FastAPI dependency to extract and validate the user from a Bearer token

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Missing authorization token"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return jwt_utils.extract_user(credentials.credentials)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Invalid token", "error": str(e)},
            headers={"WWW-Authenticate": "Bearer"},
        )


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Like get_current_user, but 403 unless the token carries the admin role"""
    if not is_admin(user):
        logger.warning(f"User {user.user_id} attempted an admin-only operation")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": "Access denied. Admin rights required."},
        )
    return user
