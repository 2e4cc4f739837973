"""
Presentation builders for the admin dashboard.

Every builder takes already-aggregated data and returns pydantic view
models. Anything that lets the admin change data is expressed as an
ActionPayload holding the minimal identifying payload; the front end
posts it back to the matching route.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from app.config import settings
from app.modules.admin.aggregation import as_utc, plan_distribution, signups_by_month
from app.modules.admin.schemas import (
    ActionPayload,
    AdminAggregate,
    AdminTab,
    ChartPoint,
    ChartSeries,
    CombinedUser,
    DashboardStats,
    DashboardView,
    ExchangeRate,
    ExpiryItem,
    ExpiryWidget,
    InsightPanel,
    Plan,
    PlanStats,
    RateCard,
    RequestCard,
    StatCard,
    SubscriptionEditDraft,
    SubscriptionRequest,
    SubscriptionTable,
    UserFilters,
    UserRow,
    UserTable,
)
from app.modules.admin.state import AdminState, draft_for


def format_currency(amount: float, currency: Optional[str] = None) -> str:
    return f"{currency or settings.currency} {amount:,.2f}"


def display_name(user: CombinedUser) -> str:
    return user.full_name or "Anonymous User"


def build_stat_cards(stats: DashboardStats) -> List[StatCard]:
    growth = stats.user_growth
    if growth is None:
        trend, trend_value = None, None
    else:
        trend = "up" if growth >= 0 else "down"
        trend_value = f"{growth:+.1f}%"
    return [
        StatCard(key="total_users", label="Total Users", value=stats.total_users,
                 color="indigo", trend=trend, trend_value=trend_value),
        StatCard(key="pending_requests", label="Pending Requests", value=stats.pending_requests, color="amber"),
        StatCard(key="active_subscriptions", label="Active Subscriptions", value=stats.active_subscriptions,
                 color="emerald"),
        StatCard(key="revenue", label="Est. Monthly Revenue", value=format_currency(stats.revenue), color="blue"),
        StatCard(key="new_users", label=f"New Users ({settings.new_user_window_days}d)", value=stats.new_users,
                 color="violet"),
        StatCard(key="expiring_soon", label=f"Expiring in {settings.expiry_warning_days}d",
                 value=stats.expiring_soon, color="rose"),
    ]


def filter_users(
    users: Sequence[CombinedUser],
    search: str = "",
    plan: str = "all",
    status: str = "all",
) -> List[CombinedUser]:
    """Free text on name/email, exact plan id, active flag. All three must match."""
    needle = search.lower()

    def matches(user: CombinedUser) -> bool:
        match_search = (
            needle in (user.full_name or "").lower()
            or needle in (user.email or "").lower()
        )
        match_plan = plan == "all" or user.plan_id == plan
        match_status = (
            status == "all"
            or (status == "active" and user.is_active)
            or (status == "inactive" and not user.is_active)
        )
        return match_search and match_plan and match_status

    return [u for u in users if matches(u)]


def build_edit_draft(user: CombinedUser) -> SubscriptionEditDraft:
    return draft_for(user)


def _user_actions(user: CombinedUser) -> List[ActionPayload]:
    return [
        ActionPayload(name="toggle_status", payload={"user_id": user.id, "is_active": user.is_active}),
        ActionPayload(name="edit", payload=build_edit_draft(user).model_dump()),
    ]


def build_user_table(users: Sequence[CombinedUser], filters: UserFilters, plans: Sequence[Plan]) -> UserTable:
    filtered = filter_users(users, filters.search, filters.plan, filters.status)
    rows = [
        UserRow(
            user=u,
            display_name=display_name(u),
            initial=(u.full_name or "U")[0].upper(),
            actions=_user_actions(u),
        )
        for u in filtered
    ]
    return UserTable(filters=filters, total=len(users), rows=rows, plan_options=list(plans))


def build_subscription_table(plan_stats: Sequence[PlanStats]) -> SubscriptionTable:
    return SubscriptionTable(
        rows=list(plan_stats),
        total_users=sum(p.users for p in plan_stats),
        total_revenue=sum(p.revenue for p in plan_stats),
    )


def build_request_cards(requests: Sequence[SubscriptionRequest]) -> List[RequestCard]:
    cards = []
    for req in requests:
        if req.status != "pending":
            continue
        profile = req.profiles
        cards.append(RequestCard(
            request_id=req.id,
            user_id=req.user_id,
            requester_name=(profile.full_name if profile else None) or "Unknown User",
            requester_email=profile.email if profile else None,
            plan_id=req.plan_id,
            plan_name=(req.plans.name if req.plans else None) or req.plan_id,
            requested_at=req.requested_at,
            actions=[
                ActionPayload(name="approve", payload={"request_id": req.id, "confirm": True}),
                ActionPayload(name="reject", payload={"request_id": req.id, "confirm": True}),
            ],
        ))
    return cards


def build_expiry_widget(
    expiring_users: Sequence[CombinedUser],
    now: Optional[datetime] = None,
    limit: int = 5,
) -> ExpiryWidget:
    now = as_utc(now) if now else datetime.now(timezone.utc)
    items = []
    for user in list(expiring_users)[:limit]:
        end = as_utc(user.current_period_end)
        items.append(ExpiryItem(
            user_id=user.id,
            display_name=display_name(user),
            plan_name=user.plan_name,
            current_period_end=end,
            days_left=(end - now).days if end else None,
        ))
    return ExpiryWidget(window_days=settings.expiry_warning_days, items=items)


def build_rate_cards(rates: Sequence[ExchangeRate]) -> List[RateCard]:
    return [
        RateCard(
            id=r.id,
            pair=f"{r.from_currency}/{r.to_currency}",
            from_currency=r.from_currency,
            to_currency=r.to_currency,
            rate=r.rate,
            rate_date=r.rate_date,
        )
        for r in rates
    ]


def build_charts(agg: AdminAggregate) -> List[ChartSeries]:
    now = agg.generated_at or datetime.now(timezone.utc)
    distribution = plan_distribution(agg.users, agg.plans)
    signups = signups_by_month(agg.users, now)
    return [
        ChartSeries(
            key="plan_distribution",
            title="Users per plan",
            kind="pie",
            points=[ChartPoint(label=k, value=v) for k, v in distribution.items()],
        ),
        ChartSeries(
            key="plan_revenue",
            title="Active revenue per plan",
            kind="bar",
            points=[ChartPoint(label=p.plan_name, value=p.revenue) for p in agg.plan_stats],
        ),
        ChartSeries(
            key="signups",
            title="Signups per month",
            kind="line",
            points=[ChartPoint(label=k, value=v) for k, v in signups.items()],
        ),
    ]


def build_insight_panel(tab: AdminTab, agg: AdminAggregate) -> InsightPanel:
    stats = agg.stats
    if tab == "users":
        insights = [
            f"{stats.active_users} of {stats.total_users} accounts have access",
            f"{stats.new_users} signups in the last {settings.new_user_window_days} days",
        ]
        if stats.user_growth is not None:
            insights.append(f"Signups {stats.user_growth:+.1f}% against the previous period")
        if stats.inactive_users:
            insights.append(f"{stats.inactive_users} accounts are restricted")
        return InsightPanel(tab=tab, title="User Directory", color="indigo", insights=insights)

    if tab == "subscriptions":
        insights = [
            f"{stats.active_subscriptions} active and {stats.expired_subscriptions} expired subscriptions",
            f"Estimated monthly revenue {format_currency(stats.revenue)}",
        ]
        top = max(agg.plan_stats, key=lambda p: p.revenue, default=None)
        if top is not None and top.revenue > 0:
            insights.append(f"{top.plan_name} leads with {format_currency(top.revenue)} active revenue")
        if stats.expiring_soon:
            insights.append(f"{stats.expiring_soon} subscriptions end within {settings.expiry_warning_days} days")
        return InsightPanel(tab=tab, title="Subscription Health", color="emerald", insights=insights)

    if tab == "requests":
        if not agg.pending_requests:
            insights = ["No pending upgrade requests"]
        else:
            insights = [f"{len(agg.pending_requests)} upgrade requests awaiting approval"]
            dated = [as_utc(r.requested_at) for r in agg.pending_requests if r.requested_at]
            if dated and agg.generated_at:
                age = (agg.generated_at - min(dated)).days
                insights.append(f"Oldest request has waited {age} days")
        return InsightPanel(tab=tab, title="Upgrade Queue", color="amber", insights=insights)

    if tab == "rates":
        insights = [f"{len(agg.exchange_rates)} currency pairs configured"]
        dates = [r.rate_date for r in agg.exchange_rates if r.rate_date]
        if dates:
            insights.append(f"Most recent rate dated {max(dates)}")
        return InsightPanel(tab=tab, title="Treasury & Forex", color="emerald", insights=insights)

    return InsightPanel(tab=tab, title="System Overview", color="indigo",
                        insights=[f"{stats.total_users} users, {stats.pending_requests} pending requests"])


def build_dashboard(
    state: AdminState,
    agg: AdminAggregate,
    filters: Optional[UserFilters] = None,
) -> DashboardView:
    """Assemble the view for the active tab. Cards, panel and charts are always present."""
    tab = state.active_tab
    view = DashboardView(
        active_tab=tab,
        loading_error=state.last_error,
        stat_cards=build_stat_cards(agg.stats),
        insight_panel=build_insight_panel(tab, agg),
        edit_draft=state.edit_draft,
        charts=build_charts(agg),
        generated_at=agg.generated_at,
    )
    if tab == "users":
        view.users = build_user_table(agg.users, filters or UserFilters(), agg.plans)
    elif tab == "subscriptions":
        view.subscriptions = build_subscription_table(agg.plan_stats)
        view.expiry = build_expiry_widget(agg.expiring_users, agg.generated_at)
    elif tab == "requests":
        view.requests = build_request_cards(agg.pending_requests)
    elif tab == "rates":
        view.rates = build_rate_cards(agg.exchange_rates)
    return view
