from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Union, Literal
from datetime import datetime


SubscriptionStatus = Literal["active", "trial", "expired", "cancelled", "none"]
RequestStatus = Literal["pending", "approved", "rejected"]
AdminTab = Literal["users", "subscriptions", "requests", "rates", "tickets", "logs"]
ActiveFilter = Literal["all", "active", "inactive"]

RowId = Union[int, str]


# Raw table rows

class Profile(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = "user"
    created_at: Optional[datetime] = None


class UserStatus(BaseModel):
    user_id: str
    is_active: Optional[bool] = None


class Plan(BaseModel):
    id: str
    name: str
    price: float = 0.0
    currency: Optional[str] = None
    features: Optional[Dict[str, Any]] = None


class Subscription(BaseModel):
    id: Optional[RowId] = None
    user_id: str
    plan_id: Optional[str] = None
    status: Optional[str] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    plans: Optional[Plan] = None


class RequestProfile(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None


class RequestPlan(BaseModel):
    name: Optional[str] = None


class SubscriptionRequest(BaseModel):
    id: RowId
    user_id: str
    plan_id: str
    status: Optional[str] = None
    requested_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    profiles: Optional[RequestProfile] = None
    plans: Optional[RequestPlan] = None


class ExchangeRate(BaseModel):
    id: RowId
    from_currency: str
    to_currency: str
    rate: float
    rate_date: Optional[str] = None


class AdminSnapshot(BaseModel):
    """Everything one refresh pulled from the backend, as fetched."""
    profiles: List[Profile] = []
    user_statuses: List[UserStatus] = []
    subscriptions: List[Subscription] = []
    plans: List[Plan] = []
    requests: List[SubscriptionRequest] = []
    exchange_rates: List[ExchangeRate] = []
    fetched_at: Optional[datetime] = None


# Aggregated shapes

class CombinedUser(BaseModel):
    """Profile merged with its status and subscription rows. Never persisted."""
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    created_at: Optional[datetime] = None
    is_active: bool = True
    subscription_id: Optional[RowId] = None
    plan_id: str
    plan_name: Optional[str] = None
    status: str = "none"
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DashboardStats(BaseModel):
    total_users: int = 0
    active_users: int = 0
    inactive_users: int = 0
    new_users: int = 0
    active_subscriptions: int = 0
    expired_subscriptions: int = 0
    pending_requests: int = 0
    revenue: float = 0.0
    user_growth: Optional[float] = None  # percent, None when there is no previous window to compare
    expiring_soon: int = 0


class PlanStats(BaseModel):
    plan_id: str
    plan_name: str
    price: float
    users: int = 0
    active: int = 0
    trial: int = 0
    expired: int = 0
    revenue: float = 0.0


class AdminAggregate(BaseModel):
    users: List[CombinedUser] = []
    stats: DashboardStats = DashboardStats()
    plan_stats: List[PlanStats] = []
    pending_requests: List[SubscriptionRequest] = []
    expiring_users: List[CombinedUser] = []
    plans: List[Plan] = []
    exchange_rates: List[ExchangeRate] = []
    generated_at: Optional[datetime] = None


# View models

class ActionPayload(BaseModel):
    name: str
    payload: Dict[str, Any]


class StatCard(BaseModel):
    key: str
    label: str
    value: Union[int, float, str]
    color: str
    trend: Optional[Literal["up", "down"]] = None
    trend_value: Optional[str] = None


class UserFilters(BaseModel):
    search: str = ""
    plan: str = "all"
    status: ActiveFilter = "all"


class SubscriptionEditDraft(BaseModel):
    user_id: str
    plan_id: str
    status: SubscriptionStatus


class UserRow(BaseModel):
    user: CombinedUser
    display_name: str
    initial: str
    actions: List[ActionPayload]


class UserTable(BaseModel):
    filters: UserFilters
    total: int
    rows: List[UserRow]
    plan_options: List[Plan]


class SubscriptionTable(BaseModel):
    rows: List[PlanStats]
    total_users: int
    total_revenue: float


class RequestCard(BaseModel):
    request_id: RowId
    user_id: str
    requester_name: str
    requester_email: Optional[str] = None
    plan_id: str
    plan_name: str
    requested_at: Optional[datetime] = None
    actions: List[ActionPayload]


class ExpiryItem(BaseModel):
    user_id: str
    display_name: str
    plan_name: Optional[str] = None
    current_period_end: Optional[datetime] = None
    days_left: Optional[int] = None


class ExpiryWidget(BaseModel):
    window_days: int
    items: List[ExpiryItem]


class RateCard(BaseModel):
    id: RowId
    pair: str
    from_currency: str
    to_currency: str
    rate: float
    rate_date: Optional[str] = None


class ChartPoint(BaseModel):
    label: str
    value: float


class ChartSeries(BaseModel):
    key: str
    title: str
    kind: Literal["bar", "line", "pie"]
    points: List[ChartPoint]


class InsightPanel(BaseModel):
    tab: AdminTab
    title: str
    color: str
    insights: List[str]


class DashboardView(BaseModel):
    active_tab: AdminTab
    loading_error: Optional[str] = None
    stat_cards: List[StatCard]
    insight_panel: InsightPanel
    edit_draft: Optional[SubscriptionEditDraft] = None
    users: Optional[UserTable] = None
    subscriptions: Optional[SubscriptionTable] = None
    expiry: Optional[ExpiryWidget] = None
    requests: Optional[List[RequestCard]] = None
    rates: Optional[List[RateCard]] = None
    charts: List[ChartSeries] = []
    generated_at: Optional[datetime] = None


# Request / response bodies

class ConfirmAction(BaseModel):
    confirm: bool = False


class ToggleStatusRequest(BaseModel):
    is_active: bool = Field(..., description="The flag as currently displayed; it will be inverted")


class SubscriptionEdit(BaseModel):
    plan_id: str
    status: SubscriptionStatus


class MutationResponse(BaseModel):
    message: str
    record: Optional[Dict[str, Any]] = None
    stats: DashboardStats
    refresh_error: Optional[str] = None
