"""
Webhook data models.
"""

from typing import List, Optional, Dict, Any
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from .events import is_known_event


class WebhookAuthType(str, Enum):
    """How an outbound call authenticates against the receiver."""
    NONE = "none"
    APIKEY = "apikey"
    BEARER = "bearer"
    BASIC = "basic"


class ApiKeyAuth(BaseModel):
    """API key sent in a custom header."""
    header: str = Field(default="X-API-Key", min_length=1)
    value: str


class BearerAuth(BaseModel):
    """Bearer token sent in the Authorization header."""
    token: str


class BasicAuth(BaseModel):
    """HTTP basic credentials."""
    username: str
    password: str


class WebhookAuthConfig(BaseModel):
    """Credentials keyed by scheme; only the one matching auth_type is used."""
    apikey: Optional[ApiKeyAuth] = None
    bearer: Optional[BearerAuth] = None
    basic: Optional[BasicAuth] = None


def _check_events(events: Optional[List[str]]) -> Optional[List[str]]:
    if events is None:
        return events
    unknown = [event for event in events if not is_known_event(event)]
    if unknown:
        raise ValueError(f"Unknown event types: {', '.join(unknown)}")
    # keep first occurrence order
    return list(dict.fromkeys(events))


class WebhookCreate(BaseModel):
    """Payload for registering a webhook."""
    name: str = Field(..., min_length=1, max_length=200)
    url: HttpUrl
    enabled: bool = True
    auth_type: WebhookAuthType
    auth_config: Optional[WebhookAuthConfig] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    events: List[str] = Field(default_factory=list)

    @field_validator("events")
    @classmethod
    def validate_events(cls, v):
        """Reject event names outside the catalog."""
        return _check_events(v)


class WebhookUpdate(BaseModel):
    """Partial update; only fields present in the request are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    url: Optional[HttpUrl] = None
    enabled: Optional[bool] = None
    auth_type: Optional[WebhookAuthType] = None
    auth_config: Optional[WebhookAuthConfig] = None
    headers: Optional[Dict[str, str]] = None
    events: Optional[List[str]] = None

    @field_validator("events")
    @classmethod
    def validate_events(cls, v):
        """Reject event names outside the catalog."""
        return _check_events(v)


class WebhookResponse(BaseModel):
    """Webhook as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    url: str
    enabled: bool
    auth_type: WebhookAuthType
    auth_config: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    events: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class WebhookLogResponse(BaseModel):
    """A delivery log row."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    webhook_id: str
    event_type: str
    payload: Any = None
    response_status: Optional[int] = None
    response_body: Optional[str] = None
    success: bool
    error_message: Optional[str] = None
    duration_ms: float = 0.0
    created_at: datetime


class WebhookTestRequest(BaseModel):
    """Body of the test endpoint; both fields are optional."""
    event: Optional[str] = Field(None, min_length=1, max_length=100)
    payload: Optional[Any] = None


class DeliveryResult(BaseModel):
    """Outcome of a single delivery."""
    webhook_id: Optional[str] = None
    success: bool
    status: Optional[int] = None
    status_text: Optional[str] = None
    body: Optional[str] = None
    error: Optional[str] = None
    duration_ms: float = 0.0


class WebhookStats(BaseModel):
    """Delivery statistics for one webhook."""
    webhook_id: str
    enabled: bool
    total_deliveries: int
    successful_deliveries: int
    failed_deliveries: int
    success_rate: float
    avg_delivery_time_ms: float
    last_delivery: Optional[datetime] = None


class EventDescriptor(BaseModel):
    """Catalog entry for a subscribable event."""
    value: str
    label: str
    group: str
    example: Dict[str, Any]
