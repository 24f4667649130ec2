"""
Single-shot HTTP delivery of an event to one webhook.
"""

import base64
import json
import time
from typing import Any, Dict

import httpx
from fastapi.encoders import jsonable_encoder
from loguru import logger

from app.core.config import settings
from app.models.webhook import Webhook

from .models import DeliveryResult, WebhookAuthType
from .registry import WebhookRegistry


def build_auth_headers(auth_type: str, auth_config: Dict[str, Any]) -> Dict[str, str]:
    """
    Headers that authenticate a call under the configured scheme.

    A scheme without its credentials block yields no header; the call
    is still made unauthenticated.
    """
    auth_config = auth_config or {}

    if auth_type == WebhookAuthType.APIKEY.value and auth_config.get("apikey"):
        apikey = auth_config["apikey"]
        return {apikey.get("header") or "X-API-Key": apikey.get("value", "")}

    if auth_type == WebhookAuthType.BEARER.value and auth_config.get("bearer"):
        return {"Authorization": f"Bearer {auth_config['bearer'].get('token', '')}"}

    if auth_type == WebhookAuthType.BASIC.value and auth_config.get("basic"):
        basic = auth_config["basic"]
        credentials = f"{basic.get('username', '')}:{basic.get('password', '')}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {encoded}"}

    return {}


def build_headers(webhook: Webhook) -> Dict[str, str]:
    """Default headers, then the webhook's own headers, then authentication."""
    headers = {
        "Content-Type": "application/json",
        "User-Agent": settings.WEBHOOK_USER_AGENT,
    }
    headers.update(webhook.headers or {})
    headers.update(build_auth_headers(webhook.auth_type, webhook.auth_config))
    return headers


def _storable(payload: Any) -> Any:
    """``payload`` if the log's JSON column can hold it, else its repr."""
    try:
        json.dumps(payload)
    except (TypeError, ValueError):
        return repr(payload)
    return payload


async def deliver(
    client: httpx.AsyncClient,
    registry: WebhookRegistry,
    webhook: Webhook,
    event_type: str,
    payload: Any,
) -> DeliveryResult:
    """
    POST ``payload`` to ``webhook`` once and record the attempt.

    Exactly one log row is written whether or not a response arrives.
    Any error raised while building or sending the request (unencodable
    payload or header, transport failure, timeout) is reported in the
    result, never raised.
    """
    start_time = time.time()

    try:
        payload = jsonable_encoder(payload)
        response = await client.post(
            webhook.url,
            content=json.dumps(payload).encode("utf-8"),
            headers=build_headers(webhook),
            timeout=settings.WEBHOOK_TIMEOUT_SECONDS,
        )
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        error_message = str(e) or type(e).__name__
        logger.error(f"Webhook {webhook.id} delivery of {event_type} failed: {type(e).__name__}: {error_message}")

        registry.record_delivery(
            webhook_id=webhook.id,
            event_type=event_type,
            payload=_storable(payload),
            success=False,
            error_message=error_message,
            duration_ms=duration_ms,
        )
        return DeliveryResult(
            webhook_id=webhook.id,
            success=False,
            error=error_message,
            duration_ms=duration_ms,
        )

    duration_ms = (time.time() - start_time) * 1000
    success = 200 <= response.status_code < 300
    body = response.text[:settings.WEBHOOK_RESPONSE_BODY_LIMIT]
    error_message = None if success else f"HTTP {response.status_code}: {response.reason_phrase}"

    if success:
        logger.info(f"Webhook {webhook.id} delivered {event_type} ({response.status_code}, {duration_ms:.0f}ms)")
    else:
        logger.warning(f"Webhook {webhook.id} rejected {event_type}: {error_message}")

    registry.record_delivery(
        webhook_id=webhook.id,
        event_type=event_type,
        payload=payload,
        success=success,
        response_status=response.status_code,
        response_body=body,
        error_message=error_message,
        duration_ms=duration_ms,
    )

    return DeliveryResult(
        webhook_id=webhook.id,
        success=success,
        status=response.status_code,
        status_text=response.reason_phrase,
        body=body,
        error=error_message,
        duration_ms=duration_ms,
    )
