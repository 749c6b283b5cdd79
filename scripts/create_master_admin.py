#!/usr/bin/env python
"""Create the master admin user.

Run with: python scripts/create_master_admin.py [--force]

Reads MASTER_ADMIN_EMAIL and REDIS_URL from the environment.
"""

import argparse
import asyncio
import os
import sys

import structlog

from youkhana.adapters.kv import KeyValueStore
from youkhana.core.errors import AdminError
from youkhana.services.bootstrap import create_master_admin

logger = structlog.get_logger()


async def run(email: str, redis_url: str, force: bool) -> int:
    store = KeyValueStore(redis_url)
    await store.connect()
    try:
        user = await create_master_admin(store, email, force=force)
    except AdminError as e:
        logger.error("master_admin_not_created", email=email, reason=e.message)
        if not force:
            print("Re-run with --force to replace the existing record.")
        return 1
    finally:
        await store.close()

    print(f"Master admin created: {user.email} ({user.role.value})")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the master admin user.")
    parser.add_argument("--force", action="store_true", help="Replace an existing record")
    args = parser.parse_args()

    email = os.getenv("MASTER_ADMIN_EMAIL")
    if not email:
        print("MASTER_ADMIN_EMAIL is not set", file=sys.stderr)
        sys.exit(1)

    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    sys.exit(asyncio.run(run(email, redis_url, args.force)))


if __name__ == "__main__":
    main()
