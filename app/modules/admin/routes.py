from fastapi import APIRouter, Depends
from app.database.supabase_client import get_admin_supabase
from app.modules.admin.schemas import (
    ActiveFilter, AdminTab, ChartSeries, ConfirmAction, DashboardView,
    ExpiryWidget, InsightPanel, MutationResponse, RateCard, RequestCard,
    StatCard, SubscriptionEdit, SubscriptionEditDraft, SubscriptionTable,
    ToggleStatusRequest, UserFilters, UserTable
)
from app.modules.admin.service import AdminService
from app.modules.admin.state import begin_edit, select_tab
from app.modules.admin import views
from app.core.dependencies import require_superadmin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_admin_supabase)) -> AdminService:
    return AdminService(supabase)


def get_user_filters(search: str = "", plan: str = "all", status: ActiveFilter = "all") -> UserFilters:
    return UserFilters(search=search, plan=plan, status=status)


@router.get("/dashboard", response_model=DashboardView)
async def get_dashboard(
    tab: AdminTab = "users",
    filters: UserFilters = Depends(get_user_filters),
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    """Full dashboard for one tab: stat cards, insight panel, charts and the tab's tables"""
    state, agg = await service.refresh()
    state = select_tab(state, tab)
    return views.build_dashboard(state, agg, filters)


@router.get("/stats", response_model=List[StatCard])
async def get_stats(
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    _, agg = await service.refresh()
    return views.build_stat_cards(agg.stats)


@router.get("/users", response_model=UserTable)
async def list_users(
    filters: UserFilters = Depends(get_user_filters),
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    """User directory filtered by name/email text, plan id and active flag"""
    _, agg = await service.refresh()
    return views.build_user_table(agg.users, filters, agg.plans)


@router.get("/users/{user_id}/edit-draft", response_model=SubscriptionEditDraft)
async def get_edit_draft(
    user_id: str,
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    """Start editing a user's subscription"""
    state, user = await service.get_user(user_id)
    return begin_edit(state, user).edit_draft


@router.post("/users/{user_id}/toggle-status", response_model=MutationResponse)
async def toggle_user_status(
    user_id: str,
    body: ToggleStatusRequest,
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    """Invert the user's active flag (body carries the flag currently shown)"""
    return await service.toggle_user_active(user_id, body.is_active)


@router.put("/users/{user_id}/subscription", response_model=MutationResponse)
async def edit_subscription(
    user_id: str,
    body: SubscriptionEdit,
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    return await service.edit_subscription(user_id, body)


@router.get("/subscriptions", response_model=SubscriptionTable)
async def get_subscription_table(
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    """Per-plan user counts and active revenue"""
    _, agg = await service.refresh()
    return views.build_subscription_table(agg.plan_stats)


@router.get("/expiring", response_model=ExpiryWidget)
async def get_expiring(
    limit: int = 5,
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    _, agg = await service.refresh()
    return views.build_expiry_widget(agg.expiring_users, agg.generated_at, limit=limit)


@router.get("/requests", response_model=List[RequestCard])
async def list_requests(
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    """Pending upgrade requests"""
    _, agg = await service.refresh()
    return views.build_request_cards(agg.pending_requests)


@router.post("/requests/{request_id}/approve", response_model=MutationResponse)
async def approve_request(
    request_id: str,
    body: ConfirmAction,
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    """Approve a pending request and activate the requested plan (requires confirm=true)"""
    return await service.approve_request(request_id, body.confirm)


@router.post("/requests/{request_id}/reject", response_model=MutationResponse)
async def reject_request(
    request_id: str,
    body: ConfirmAction,
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    """Reject a pending request (requires confirm=true)"""
    return await service.reject_request(request_id, body.confirm)


@router.get("/rates", response_model=List[RateCard])
async def list_rates(
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    _, agg = await service.refresh()
    return views.build_rate_cards(agg.exchange_rates)


@router.get("/charts", response_model=List[ChartSeries])
async def get_charts(
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    _, agg = await service.refresh()
    return views.build_charts(agg)


@router.get("/insights", response_model=InsightPanel)
async def get_insights(
    tab: AdminTab = "users",
    admin: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service)
):
    _, agg = await service.refresh()
    return views.build_insight_panel(tab, agg)
