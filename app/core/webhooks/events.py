"""
Catalog of events that webhooks can subscribe to.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class WebhookEventType(str, Enum):
    """Subscribable events."""

    # Conversations
    CONVERSATION_CREATED = "conversation.created"
    CONVERSATION_ASSIGNED = "conversation.assigned"
    CONVERSATION_TRANSFERRED = "conversation.transferred"
    CONVERSATION_CLOSED = "conversation.closed"

    # Messages
    MESSAGE_SENT = "message.sent"
    MESSAGE_UPDATED = "message.updated"
    MESSAGE_DELETED = "message.deleted"

    # Users
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"


# Pseudo-event used by the test endpoint; never stored in a subscription.
TEST_EVENT = "test"

EVENT_GROUPS: Dict[str, Dict[str, Any]] = {
    "conversations": {
        "label": "Conversations",
        "events": {
            WebhookEventType.CONVERSATION_CREATED: "Conversation created",
            WebhookEventType.CONVERSATION_ASSIGNED: "Conversation assigned",
            WebhookEventType.CONVERSATION_TRANSFERRED: "Conversation transferred",
            WebhookEventType.CONVERSATION_CLOSED: "Conversation closed",
        },
    },
    "messages": {
        "label": "Messages",
        "events": {
            WebhookEventType.MESSAGE_SENT: "Message sent",
            WebhookEventType.MESSAGE_UPDATED: "Message updated",
            WebhookEventType.MESSAGE_DELETED: "Message deleted",
        },
    },
    "users": {
        "label": "Users",
        "events": {
            WebhookEventType.USER_CREATED: "User created",
            WebhookEventType.USER_UPDATED: "User updated",
            WebhookEventType.USER_DELETED: "User deleted",
        },
    },
}

EXAMPLE_DATA: Dict[WebhookEventType, Dict[str, Any]] = {
    WebhookEventType.CONVERSATION_CREATED: {
        "id": "conv_123",
        "protocol": "ABC1234567",
        "channel": "webchat",
        "status": "waiting",
        "client_id": "user_456",
        "client_ip": "192.168.1.1",
        "client_location": "Sao Paulo, BR",
    },
    WebhookEventType.CONVERSATION_ASSIGNED: {
        "id": "conv_123",
        "protocol": "ABC1234567",
        "status": "active",
        "attendant_id": "att_789",
    },
    WebhookEventType.CONVERSATION_TRANSFERRED: {
        "conversation": {"id": "conv_123", "protocol": "ABC1234567"},
        "from_attendant_id": "att_789",
        "to_attendant_id": "att_012",
    },
    WebhookEventType.CONVERSATION_CLOSED: {
        "id": "conv_123",
        "protocol": "ABC1234567",
        "status": "closed",
    },
    WebhookEventType.MESSAGE_SENT: {
        "message": {
            "id": "msg_456",
            "conversation_id": "conv_123",
            "sender_id": "att_789",
            "content": "Hello, how can I help?",
            "type": "text",
        },
        "conversation_id": "conv_123",
    },
    WebhookEventType.MESSAGE_UPDATED: {
        "message": {
            "id": "msg_456",
            "conversation_id": "conv_123",
            "content": "Edited message",
        },
        "conversation_id": "conv_123",
    },
    WebhookEventType.MESSAGE_DELETED: {
        "message_id": "msg_456",
        "conversation_id": "conv_123",
    },
    WebhookEventType.USER_CREATED: {
        "id": "user_789",
        "email": "user@example.com",
        "display_name": "New User",
        "role": "client",
    },
    WebhookEventType.USER_UPDATED: {
        "id": "user_789",
        "email": "user@example.com",
        "display_name": "Updated Name",
    },
    WebhookEventType.USER_DELETED: {
        "id": "user_789",
        "user": {"email": "user@example.com", "display_name": "Deleted User"},
    },
}

_KNOWN_EVENTS = {event.value for event in WebhookEventType}


def is_known_event(event_type: str) -> bool:
    return event_type in _KNOWN_EVENTS


def build_envelope(event_type: str, data: Any, timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    """Wrap event data in the body POSTed to subscribers."""
    timestamp = timestamp or datetime.now(timezone.utc)
    return {
        "event": event_type,
        "timestamp": timestamp.isoformat(),
        "data": data,
    }


def list_event_catalog() -> List[Dict[str, Any]]:
    """Flatten the catalog for the API, each entry with an example envelope."""
    catalog = []
    for group, entry in EVENT_GROUPS.items():
        for event, label in entry["events"].items():
            catalog.append({
                "value": event.value,
                "label": label,
                "group": group,
                "example": build_envelope(event.value, EXAMPLE_DATA[event]),
            })
    return catalog
