"""
Webhook administration endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.dependencies import get_webhook_registry, require_admin
from app.core.webhooks import WebhookManager, WebhookRegistry, get_webhook_manager
from app.core.webhooks.events import list_event_catalog
from app.core.webhooks.models import (
    DeliveryResult,
    EventDescriptor,
    WebhookCreate,
    WebhookLogResponse,
    WebhookResponse,
    WebhookStats,
    WebhookTestRequest,
    WebhookUpdate,
)
from app.db.session import get_db

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("", response_model=List[WebhookResponse])
async def list_webhooks(registry: WebhookRegistry = Depends(get_webhook_registry)):
    """List all webhooks, newest first."""
    return registry.list_webhooks()


@router.get("/events", response_model=List[EventDescriptor])
async def list_events():
    """Events a webhook can subscribe to, with example payloads."""
    return list_event_catalog()


@router.get("/{webhook_id}", response_model=WebhookResponse)
async def get_webhook(webhook_id: str, registry: WebhookRegistry = Depends(get_webhook_registry)):
    return registry.get_webhook(webhook_id)


@router.post("", response_model=WebhookResponse)
async def create_webhook(data: WebhookCreate, registry: WebhookRegistry = Depends(get_webhook_registry)):
    """Register a webhook."""
    return registry.create_webhook(data)


@router.patch("/{webhook_id}", response_model=WebhookResponse)
async def update_webhook(
    webhook_id: str,
    data: WebhookUpdate,
    registry: WebhookRegistry = Depends(get_webhook_registry),
):
    """Update the supplied fields of a webhook."""
    return registry.update_webhook(webhook_id, data)


@router.delete("/{webhook_id}")
async def delete_webhook(webhook_id: str, registry: WebhookRegistry = Depends(get_webhook_registry)):
    registry.delete_webhook(webhook_id)
    return {"message": "Webhook deleted"}


@router.post("/{webhook_id}/test", response_model=DeliveryResult)
async def test_webhook(
    webhook_id: str,
    test_request: Optional[WebhookTestRequest] = None,
    db: Session = Depends(get_db),
    manager: WebhookManager = Depends(get_webhook_manager),
):
    """
    Deliver a test payload to one webhook.

    Without a payload a sample envelope is sent. The attempt is logged
    like any other delivery; the result is returned whether or not the
    receiver accepted it.
    """
    test_request = test_request or WebhookTestRequest()
    webhook = WebhookRegistry(db).get_webhook(webhook_id)
    return await manager.test_webhook(db, webhook, test_request.event, test_request.payload)


@router.get("/{webhook_id}/logs", response_model=List[WebhookLogResponse])
async def list_webhook_logs(
    webhook_id: str,
    limit: int = Query(settings.WEBHOOK_LOG_DEFAULT_LIMIT, ge=1, le=settings.WEBHOOK_LOG_MAX_LIMIT),
    registry: WebhookRegistry = Depends(get_webhook_registry),
):
    """Most recent deliveries of a webhook, newest first."""
    return registry.list_logs(webhook_id, limit=limit)


@router.get("/{webhook_id}/stats", response_model=WebhookStats)
async def get_webhook_stats(webhook_id: str, registry: WebhookRegistry = Depends(get_webhook_registry)):
    return registry.delivery_stats(webhook_id)
