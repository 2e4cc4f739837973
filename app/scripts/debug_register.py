"""
Scripted signup to check the profile-creation trigger.

Registers a throwaway user, then looks for the profiles row the database
trigger should have inserted for it.

    python -m app.scripts.debug_register
"""

import logging
import time

from fastapi import HTTPException

from app.database.supabase_client import get_supabase
from app.database.remote_client import RemoteDataClient, RemoteDataError
from app.modules.auth.schemas import RegisterRequest
from app.modules.auth.service import AuthService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    supabase = get_supabase()
    logger.info("Attempting simulated registration...")

    request = RegisterRequest(
        email=f"test.user.{int(time.time() * 1000)}@example.com",
        password="TestPassword123!",
        full_name="Debug User",
    )
    try:
        registered = AuthService(supabase).register(request)
    except HTTPException as e:
        logger.error(f"Registration failed: {e.detail}")
        return

    logger.info("Registration successful")
    logger.info(f"User ID: {registered.user_id}")

    try:
        rows = RemoteDataClient(supabase).select("profiles", filters={"id": registered.user_id}, limit=1)
    except RemoteDataError as e:
        logger.error(f"Profile lookup failed: {e.message}")
        return
    if not rows:
        logger.error("Profile creation failed (trigger check): no profiles row for the new user")
    else:
        logger.info(f"Profile created: {rows[0]}")


if __name__ == "__main__":
    main()
