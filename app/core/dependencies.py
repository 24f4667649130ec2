"""
FastAPI dependency functions.
"""

from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.security import decode_access_token
from app.core.webhooks import WebhookRegistry
from app.db.session import get_db
from app.models.user import User, UserRole
from app.utils.exceptions import AuthenticationError, AuthorizationError

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the authenticated user from the bearer token.

    Raises AuthenticationError (401) when the token is missing or invalid,
    or when it refers to a missing or deactivated user.
    """
    if credentials is None:
        raise AuthenticationError()

    payload = decode_access_token(credentials.credentials)
    user = db.get(User, payload["sub"])
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")
    return user


def require_role(*roles: UserRole) -> Callable:
    """Dependency factory: the current user must hold one of ``roles``."""
    allowed = {role.value for role in roles}

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise AuthorizationError(
                "Insufficient permissions",
                details={"required_roles": sorted(allowed)},
            )
        return current_user

    return checker


require_admin = require_role(UserRole.ADMIN)


def get_webhook_registry(db: Session = Depends(get_db)) -> WebhookRegistry:
    return WebhookRegistry(db)
