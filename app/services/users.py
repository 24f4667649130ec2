"""
User provisioning.
"""

from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import hash_password
from app.core.webhooks import WebhookEventType, WebhookManager
from app.models.user import User, UserRole
from app.utils.exceptions import ConflictError


async def create_user(
    db: Session,
    email: str,
    password: str,
    display_name: str,
    role: UserRole = UserRole.CLIENT,
    manager: Optional[WebhookManager] = None,
) -> User:
    """
    Create a user and notify ``user.created`` subscribers.

    Raises ConflictError if the email is already registered.
    """
    email = email.strip().lower()
    if db.scalars(select(User).where(User.email == email)).first() is not None:
        raise ConflictError("Email already registered", details={"email": email})

    user = User(
        email=email,
        display_name=display_name,
        hashed_password=hash_password(password),
        role=role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created {user.role} user {user.id}")

    if manager is not None:
        await manager.trigger_event(
            db,
            WebhookEventType.USER_CREATED.value,
            {"id": user.id, "email": user.email, "display_name": user.display_name, "role": user.role},
        )
    return user
