"""
Connectivity check against the Supabase REST endpoint.

Issues a single read of profiles with only the anon key (no user session)
and prints the HTTP status and body.

    python -m app.scripts.check_connection
"""

import logging

import httpx

from app.config import settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    url = f"{settings.supabase_url.rstrip('/')}/rest/v1/profiles"
    logger.info(f"Testing connection to: {settings.supabase_url}")
    try:
        response = httpx.get(
            url,
            params={"select": "count"},
            headers={
                "apikey": settings.supabase_key,
                "Authorization": f"Bearer {settings.supabase_key}",
            },
        )
        logger.info(f"Status: {response.status_code}")
        logger.info(f"Body: {response.text}")
    except httpx.HTTPError as e:
        logger.error(f"Fetch failed: {e}")


if __name__ == "__main__":
    main()
