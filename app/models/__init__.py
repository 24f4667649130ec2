"""
ORM models.
"""

from .user import User, UserRole
from .webhook import Webhook, WebhookLog

__all__ = ["User", "UserRole", "Webhook", "WebhookLog"]
