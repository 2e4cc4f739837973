from fastapi import APIRouter, Depends
from app.modules.auth.schemas import LoginRequest, TokenResponse, AccountResponse
from app.modules.auth.service import AuthService
from app.core.dependencies import get_auth_service, get_current_account, get_current_user_id, is_superadmin
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    service.logout()
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=AccountResponse)
async def get_me(account: Dict = Depends(get_current_account)):
    """Current user with profile role and access flag (for frontend routing)"""
    return AccountResponse(
        id=account["id"],
        email=account.get("email"),
        role=account.get("role"),
        is_active=account["is_active"],
        is_superadmin=is_superadmin(account),
    )
