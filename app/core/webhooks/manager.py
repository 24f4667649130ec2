"""
Webhook dispatch: fan events out to subscribed endpoints.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Set

import httpx
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import SessionLocal
from app.models.webhook import Webhook

from .delivery import deliver
from .events import TEST_EVENT, build_envelope
from .models import DeliveryResult
from .registry import WebhookRegistry


class WebhookManager:
    """Delivers events to webhooks over one shared HTTP client."""

    def __init__(self,
                 client: Optional[httpx.AsyncClient] = None,
                 session_factory: Callable[[], Session] = SessionLocal):
        """Initialize webhook manager."""
        self.client = client
        self.session_factory = session_factory
        self._owns_client = client is None
        self._background_tasks: Set[asyncio.Task] = set()

    async def start(self):
        """Open the HTTP client."""
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=settings.WEBHOOK_TIMEOUT_SECONDS)
            self._owns_client = True
        logger.info("Webhook manager started")

    async def stop(self):
        """Wait for in-flight background dispatches and close the client."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        if self.client is not None and self._owns_client:
            await self.client.aclose()
            self.client = None
        logger.info("Webhook manager stopped")

    def _get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=settings.WEBHOOK_TIMEOUT_SECONDS)
            self._owns_client = True
        return self.client

    async def trigger_webhook(self,
                              db: Session,
                              webhook: Webhook,
                              event_type: str,
                              payload: Any) -> DeliveryResult:
        """Deliver ``payload`` to a single webhook."""
        return await deliver(self._get_client(), WebhookRegistry(db), webhook, event_type, payload)

    async def trigger_event(self,
                            db: Session,
                            event_type: str,
                            data: Any,
                            timestamp: Optional[datetime] = None) -> List[DeliveryResult]:
        """
        Deliver an event to every enabled webhook subscribed to it.

        Deliveries run concurrently and all of them are awaited; one
        failing subscriber never prevents delivery to the others. Errors
        loading subscribers are logged and produce an empty result.
        """
        payload = build_envelope(event_type, data, timestamp)

        try:
            subscribers = WebhookRegistry(db).list_enabled_for_event(event_type)
        except SQLAlchemyError as e:
            logger.error(f"Error loading webhooks for event {event_type}: {e}")
            return []

        if not subscribers:
            logger.debug(f"No webhooks subscribed to {event_type}")
            return []

        settled = await asyncio.gather(
            *(self.trigger_webhook(db, webhook, event_type, payload) for webhook in subscribers),
            return_exceptions=True,
        )

        results = []
        for webhook, outcome in zip(subscribers, settled):
            if isinstance(outcome, BaseException):
                logger.error(f"Webhook {webhook.id} dispatch of {event_type} raised: {outcome!r}")
                results.append(DeliveryResult(webhook_id=webhook.id, success=False, error=str(outcome)))
            else:
                results.append(outcome)

        delivered = sum(1 for result in results if result.success)
        logger.info(f"Triggered event {event_type} to {len(subscribers)} webhooks ({delivered} succeeded)")
        return results

    async def _trigger_event_in_own_session(self, event_type: str, data: Any, timestamp: datetime):
        db = self.session_factory()
        try:
            await self.trigger_event(db, event_type, data, timestamp)
        except Exception as e:
            logger.error(f"Background dispatch of {event_type} failed: {e}")
        finally:
            db.close()

    def emit_event(self, event_type: str, data: Any) -> asyncio.Task:
        """
        Schedule ``trigger_event`` without waiting for it.

        The task uses its own session so it can outlive the request that
        emitted the event. Must be called from a running event loop.

        For request handlers that should not wait on subscribers. No
        route emits events yet; scripts such as ``create_admin`` run
        outside a server and await ``trigger_event`` so that delivery
        finishes before the process exits.
        """
        timestamp = datetime.now(timezone.utc)
        task = asyncio.get_running_loop().create_task(
            self._trigger_event_in_own_session(event_type, data, timestamp)
        )
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def test_webhook(self,
                           db: Session,
                           webhook: Webhook,
                           event: Optional[str] = None,
                           payload: Any = None) -> DeliveryResult:
        """Send a sample (or caller-supplied) payload to one webhook."""
        event_type = event or TEST_EVENT
        if payload is None:
            payload = build_envelope(event_type, {"message": "Test webhook payload"})

        logger.info(f"Testing webhook {webhook.id} with event {event_type}")
        return await self.trigger_webhook(db, webhook, event_type, payload)


# Global webhook manager instance
webhook_manager = WebhookManager()


def get_webhook_manager() -> WebhookManager:
    """Get the global webhook manager instance."""
    return webhook_manager
