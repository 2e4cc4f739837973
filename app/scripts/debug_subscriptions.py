"""
Find users holding more than one subscription row.

The admin views keep only the first row per user, so duplicates silently
hide data; this dumps them.

    python -m app.scripts.debug_subscriptions
"""

import json
import logging
from collections import defaultdict
from typing import Any, Dict, List

from app.database.supabase_client import get_admin_supabase
from app.database.remote_client import RemoteDataClient, RemoteDataError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def group_by_user(rows: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    grouped: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for row in rows:
        grouped[row.get("user_id")].append(row)
    return dict(grouped)


def find_duplicates(rows: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    return {user_id: subs for user_id, subs in group_by_user(rows).items() if len(subs) > 1}


def main():
    try:
        rows = RemoteDataClient(get_admin_supabase()).select("subscriptions")
    except RemoteDataError as e:
        logger.error(f"Error: {e.message}")
        return

    logger.info(f"Total subscriptions: {len(rows)}")
    for user_id, subs in find_duplicates(rows).items():
        logger.info(f"User {user_id} has {len(subs)} subscriptions:")
        print(json.dumps(subs, indent=2, default=str))


if __name__ == "__main__":
    main()
