"""
Authentication endpoints.
"""

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.dependencies import get_current_user
from app.core.security import create_access_token, verify_password
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import LoginRequest, Token, UserResponse
from app.utils.exceptions import AuthenticationError

router = APIRouter()


@router.post("/login", response_model=Token)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """Exchange email and password for an access token."""
    user = db.scalars(select(User).where(User.email == login_data.email.lower())).first()

    if user is None or not user.is_active or not verify_password(login_data.password, user.hashed_password):
        logger.warning(f"Failed login for {login_data.email}")
        raise AuthenticationError("Invalid credentials")

    logger.info(f"User {user.id} logged in")
    return Token(
        access_token=create_access_token(user.id, user.role),
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    """Return the authenticated user."""
    return current_user
