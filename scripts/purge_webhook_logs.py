#!/usr/bin/env python3
"""
Delete webhook delivery logs older than the retention window.

Usage: python scripts/purge_webhook_logs.py [DAYS]
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.config import settings  # noqa: E402
from app.core.logging import configure_logging  # noqa: E402
from app.core.webhooks import WebhookRegistry  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402


def main(days: int) -> int:
    db = SessionLocal()
    try:
        removed = WebhookRegistry(db).purge_logs(days)
    finally:
        db.close()
    print(f"Removed {removed} webhook log rows older than {days} days")
    return 0


if __name__ == "__main__":
    configure_logging()
    days = int(sys.argv[1]) if len(sys.argv) > 1 else settings.WEBHOOK_LOG_RETENTION_DAYS
    sys.exit(main(days))
