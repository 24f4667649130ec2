#!/usr/bin/env python3
"""
Create an administrator account.

Usage: python scripts/create_admin.py EMAIL PASSWORD [DISPLAY_NAME]
"""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.logging import configure_logging  # noqa: E402
from app.core.webhooks import WebhookManager  # noqa: E402
from app.db.session import SessionLocal, init_db  # noqa: E402
from app.models.user import UserRole  # noqa: E402
from app.services.users import create_user  # noqa: E402
from app.utils.exceptions import ConflictError  # noqa: E402


async def main(email: str, password: str, display_name: str) -> int:
    init_db()
    manager = WebhookManager()
    await manager.start()
    db = SessionLocal()
    try:
        user = await create_user(db, email, password, display_name, UserRole.ADMIN, manager=manager)
    except ConflictError as e:
        print(f"Error: {e.message}")
        return 1
    finally:
        db.close()
        await manager.stop()

    print(f"Created admin {user.email} ({user.id})")
    return 0


if __name__ == "__main__":
    configure_logging()
    if len(sys.argv) < 3:
        print(__doc__.strip())
        sys.exit(2)
    name = sys.argv[3] if len(sys.argv) > 3 else "Administrator"
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2], name)))
