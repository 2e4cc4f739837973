"""
Verify the tables the dashboard reads exist and the Free plan row is present.

The signup trigger assigns new users to the Free plan, so a missing row
breaks registration.

    python -m app.scripts.verify_db_setup
"""

import logging

from app.config import settings
from app.database.supabase_client import get_supabase
from app.database.remote_client import RemoteDataClient, RemoteDataError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PROBES = [
    ("profiles", "id"),
    ("user_status", "user_id"),
    ("subscriptions", "id"),
]


def verify(remote: RemoteDataClient) -> bool:
    ok = True
    for table, column in PROBES:
        try:
            remote.select(table, columns=column, limit=1)
            logger.info(f"Table {table}: exists")
        except RemoteDataError as e:
            logger.error(f"Table {table} error: {e.message}")
            ok = False

    try:
        plans = remote.select("plans")
    except RemoteDataError as e:
        logger.error(f"Table plans error: {e.message}")
        return False
    logger.info("Table plans: exists")
    if not any(p.get("name") == settings.free_plan_name for p in plans):
        logger.error(f'Missing "{settings.free_plan_name}" plan; the signup trigger will fail')
        return False
    logger.info(f'"{settings.free_plan_name}" plan: exists')
    return ok


def main():
    logger.info("Verifying database setup...")
    verify(RemoteDataClient(get_supabase()))


if __name__ == "__main__":
    main()
