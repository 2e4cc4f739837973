"""
Core dependencies for route protection
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import settings
from app.database.supabase_client import get_auth_supabase, get_admin_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_auth_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def get_account_flags(user_id: str, supabase: Client) -> Dict[str, Any]:
    """Return the caller's profile role and active flag. A missing user_status row or a null flag reads as active."""
    try:
        profile_result = supabase.table("profiles")\
            .select("role")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        status_result = supabase.table("user_status")\
            .select("is_active")\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
    except Exception as e:
        logger.error(f"Error loading account flags for {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not verify account"
        )
    role = profile_result.data[0].get("role") if profile_result.data else None
    is_active = status_result.data[0].get("is_active") if status_result.data else None
    if is_active is None:
        is_active = True
    return {"role": role, "is_active": is_active}


def is_superadmin(account: Dict[str, Any]) -> bool:
    return account.get("role") == settings.admin_role


def get_current_account(
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_admin_supabase)
) -> dict:
    """Current user plus role/is_active. Restricted accounts are refused unless they are superadmins."""
    account = {**user_data, **get_account_flags(user_data["id"], supabase)}
    if not account["is_active"] and not is_superadmin(account):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access revoked. Your account has been restricted by an administrator."
        )
    return account


def require_superadmin(account: dict = Depends(get_current_account)) -> dict:
    """Dependency guarding every admin route"""
    if not is_superadmin(account):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Superadmin access required"
        )
    return account
