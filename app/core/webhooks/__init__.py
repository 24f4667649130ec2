"""
Outbound webhook notifications.
"""

from .manager import WebhookManager, webhook_manager, get_webhook_manager
from .registry import WebhookRegistry
from .events import WebhookEventType
from .models import DeliveryResult, WebhookAuthType

__all__ = [
    "WebhookManager",
    "webhook_manager",
    "get_webhook_manager",
    "WebhookRegistry",
    "WebhookEventType",
    "DeliveryResult",
    "WebhookAuthType",
]
