"""
Database-backed registry of webhook configurations and delivery logs.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import case, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.webhook import Webhook, WebhookLog
from app.utils.exceptions import DatabaseError, WebhookNotFoundError

from .models import WebhookCreate, WebhookStats, WebhookUpdate


def _dump_auth_config(auth_config) -> Optional[Dict[str, Any]]:
    if auth_config is None:
        return None
    return auth_config.model_dump(exclude_none=True)


class WebhookRegistry:
    """CRUD over webhooks and their delivery log, bound to one session."""

    def __init__(self, db: Session):
        self.db = db

    def list_webhooks(self) -> List[Webhook]:
        """All webhooks, newest first."""
        stmt = select(Webhook).order_by(Webhook.created_at.desc())
        return list(self.db.scalars(stmt))

    def get_webhook(self, webhook_id: str) -> Webhook:
        webhook = self.db.get(Webhook, webhook_id)
        if webhook is None:
            raise WebhookNotFoundError(webhook_id)
        return webhook

    def create_webhook(self, data: WebhookCreate) -> Webhook:
        webhook = Webhook(
            name=data.name,
            url=str(data.url),
            enabled=data.enabled,
            auth_type=data.auth_type.value,
            auth_config=_dump_auth_config(data.auth_config),
            headers=dict(data.headers),
            events=list(data.events),
        )
        self.db.add(webhook)
        self.db.commit()
        self.db.refresh(webhook)

        logger.info(f"Created webhook {webhook.id} ({webhook.name}) for events {webhook.events}")
        return webhook

    def update_webhook(self, webhook_id: str, data: WebhookUpdate) -> Webhook:
        """Apply only the fields present in ``data``."""
        webhook = self.get_webhook(webhook_id)

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if field == "url" and value is not None:
                value = str(data.url)
            elif field == "auth_type" and value is not None:
                value = data.auth_type.value
            elif field == "auth_config":
                value = _dump_auth_config(data.auth_config)
            elif value is None and field in ("name", "url", "enabled", "auth_type", "headers", "events"):
                # non-nullable columns: an explicit null leaves them unchanged
                continue
            setattr(webhook, field, value)

        webhook.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(webhook)

        logger.info(f"Updated webhook {webhook_id}: {sorted(changes)}")
        return webhook

    def delete_webhook(self, webhook_id: str) -> None:
        webhook = self.get_webhook(webhook_id)
        self.db.delete(webhook)
        self.db.commit()
        logger.info(f"Deleted webhook {webhook_id}")

    def list_enabled_for_event(self, event_type: str) -> List[Webhook]:
        """Enabled webhooks subscribed to ``event_type``."""
        # events is a JSON list; membership is checked in Python to stay portable
        stmt = select(Webhook).where(Webhook.enabled.is_(True))
        return [webhook for webhook in self.db.scalars(stmt) if webhook.subscribes_to(event_type)]

    def record_delivery(
        self,
        webhook_id: str,
        event_type: str,
        payload: Any,
        success: bool,
        response_status: Optional[int] = None,
        response_body: Optional[str] = None,
        error_message: Optional[str] = None,
        duration_ms: float = 0.0,
    ) -> WebhookLog:
        log = WebhookLog(
            webhook_id=webhook_id,
            event_type=event_type,
            payload=payload,
            response_status=response_status,
            response_body=response_body,
            success=success,
            error_message=error_message,
            duration_ms=duration_ms,
        )
        self.db.add(log)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to record delivery of {event_type} for webhook {webhook_id}: {e}")
            raise DatabaseError(
                "Failed to record webhook delivery",
                details={"webhook_id": webhook_id, "event_type": event_type},
            ) from e
        return log

    def list_logs(self, webhook_id: str, limit: int = 50) -> List[WebhookLog]:
        """Most recent deliveries of one webhook, newest first."""
        stmt = (
            select(WebhookLog)
            .where(WebhookLog.webhook_id == webhook_id)
            .order_by(WebhookLog.created_at.desc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    def delivery_stats(self, webhook_id: str) -> WebhookStats:
        webhook = self.get_webhook(webhook_id)

        total, successful, avg_duration, last_delivery = self.db.execute(
            select(
                func.count(WebhookLog.id),
                func.coalesce(func.sum(case((WebhookLog.success.is_(True), 1), else_=0)), 0),
                func.coalesce(func.avg(WebhookLog.duration_ms), 0.0),
                func.max(WebhookLog.created_at),
            ).where(WebhookLog.webhook_id == webhook_id)
        ).one()

        total = int(total or 0)
        successful = int(successful or 0)
        success_rate = (successful / total) * 100 if total else 0.0

        return WebhookStats(
            webhook_id=webhook.id,
            enabled=webhook.enabled,
            total_deliveries=total,
            successful_deliveries=successful,
            failed_deliveries=total - successful,
            success_rate=round(success_rate, 2),
            avg_delivery_time_ms=round(float(avg_duration or 0.0), 2),
            last_delivery=last_delivery,
        )

    def purge_logs(self, older_than_days: int) -> int:
        """Delete log rows older than the cutoff; returns how many were removed."""
        cutoff = datetime.now(timezone.utc) - timedelta(days=older_than_days)
        result = self.db.execute(delete(WebhookLog).where(WebhookLog.created_at < cutoff))
        self.db.commit()

        removed = result.rowcount or 0
        if removed:
            logger.info(f"Purged {removed} webhook log rows older than {older_than_days} days")
        return removed
