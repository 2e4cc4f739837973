"""
Pure aggregation over one admin snapshot.

Joins are done with dictionaries keyed by the foreign key (user_id,
plan_id). When a key has several rows the first one in fetch order wins,
so every profile yields exactly one combined user.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar

from app.config import settings
from app.modules.admin.schemas import (
    AdminAggregate,
    AdminSnapshot,
    CombinedUser,
    DashboardStats,
    Plan,
    PlanStats,
    Profile,
    Subscription,
    UserStatus,
)

T = TypeVar("T")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def index_by(rows: Iterable[T], key: str) -> Dict[str, T]:
    """Map key value -> first row carrying it."""
    index: Dict[str, T] = {}
    for row in rows:
        value = getattr(row, key)
        if value is not None and value not in index:
            index[value] = row
    return index


def combine_users(
    profiles: Sequence[Profile],
    statuses: Sequence[UserStatus],
    subscriptions: Sequence[Subscription],
    plans: Sequence[Plan],
) -> List[CombinedUser]:
    status_by_user = index_by(statuses, "user_id")
    sub_by_user = index_by(subscriptions, "user_id")
    plan_by_id = index_by(plans, "id")

    users = []
    for profile in profiles:
        if profile.role == settings.admin_role:
            continue
        status = status_by_user.get(profile.id)
        sub = sub_by_user.get(profile.id)
        plan_id = (sub.plan_id if sub else None) or settings.default_plan_id
        plan = plan_by_id.get(plan_id)
        if plan is None and sub is not None and sub.plans is not None:
            plan = sub.plans
        users.append(CombinedUser(
            id=profile.id,
            full_name=profile.full_name,
            email=profile.email,
            role=profile.role,
            created_at=profile.created_at,
            is_active=status.is_active if status and status.is_active is not None else True,
            subscription_id=sub.id if sub else None,
            plan_id=plan_id,
            plan_name=plan.name if plan else None,
            status=(sub.status if sub else None) or "none",
            current_period_start=sub.current_period_start if sub else None,
            current_period_end=sub.current_period_end if sub else None,
            updated_at=sub.updated_at if sub else None,
        ))
    return users


def count_new_users(users: Sequence[CombinedUser], now: datetime, days: int = 30) -> int:
    since = now - timedelta(days=days)
    return sum(1 for u in users if u.created_at and since <= as_utc(u.created_at) <= now)


def compute_user_growth(users: Sequence[CombinedUser], now: datetime, days: int = 30) -> Optional[float]:
    """Percent change of signups in the last window against the window before it."""
    current_start = now - timedelta(days=days)
    previous_start = current_start - timedelta(days=days)
    current = previous = 0
    for u in users:
        created = as_utc(u.created_at)
        if created is None:
            continue
        if current_start <= created <= now:
            current += 1
        elif previous_start <= created < current_start:
            previous += 1
    if previous == 0:
        return None
    return round((current - previous) / previous * 100, 1)


def compute_revenue(subscriptions: Sequence[Subscription], plans: Sequence[Plan]) -> float:
    """Sum of plan price over every subscription row, whatever its status.

    This approximates MRR; expired and cancelled rows still count.
    """
    price_by_plan = {p.id: p.price for p in plans}
    return float(sum(price_by_plan.get(s.plan_id, 0.0) for s in subscriptions))


def find_expiring_soon(users: Sequence[CombinedUser], now: datetime, days: int = 7) -> List[CombinedUser]:
    horizon = now + timedelta(days=days)
    expiring = [
        u for u in users
        if u.status == "active"
        and u.current_period_end is not None
        and now <= as_utc(u.current_period_end) <= horizon
    ]
    return sorted(expiring, key=lambda u: as_utc(u.current_period_end))


def compute_plan_stats(users: Sequence[CombinedUser], plans: Sequence[Plan]) -> List[PlanStats]:
    stats = []
    for plan in plans:
        plan_users = [u for u in users if u.plan_id == plan.id]
        active = sum(1 for u in plan_users if u.status == "active")
        stats.append(PlanStats(
            plan_id=plan.id,
            plan_name=plan.name,
            price=plan.price,
            users=len(plan_users),
            active=active,
            trial=sum(1 for u in plan_users if u.status == "trial"),
            expired=sum(1 for u in plan_users if u.status == "expired"),
            revenue=active * plan.price,
        ))
    return stats


def plan_distribution(users: Sequence[CombinedUser], plans: Sequence[Plan]) -> Dict[str, int]:
    """Users per plan name, in plan order; users on unknown plans are grouped by plan id."""
    counts: Dict[str, int] = {p.name: 0 for p in plans}
    names = {p.id: p.name for p in plans}
    for u in users:
        label = names.get(u.plan_id, u.plan_id)
        counts[label] = counts.get(label, 0) + 1
    return counts


def signups_by_month(users: Sequence[CombinedUser], now: datetime, months: int = 6) -> Dict[str, int]:
    """Signup counts for the last `months` calendar months, oldest first, keyed 'YYYY-MM'."""
    keys = []
    year, month = now.year, now.month
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    counts = {k: 0 for k in reversed(keys)}
    for u in users:
        created = as_utc(u.created_at)
        if created is None:
            continue
        key = f"{created.year:04d}-{created.month:02d}"
        if key in counts:
            counts[key] += 1
    return counts


def compute_dashboard_stats(
    users: Sequence[CombinedUser],
    snapshot: AdminSnapshot,
    now: datetime,
) -> DashboardStats:
    active_users = sum(1 for u in users if u.is_active)
    return DashboardStats(
        total_users=len(users),
        active_users=active_users,
        inactive_users=len(users) - active_users,
        new_users=count_new_users(users, now, settings.new_user_window_days),
        active_subscriptions=sum(1 for s in snapshot.subscriptions if s.status == "active"),
        expired_subscriptions=sum(1 for s in snapshot.subscriptions if s.status == "expired"),
        pending_requests=sum(1 for r in snapshot.requests if r.status == "pending"),
        revenue=compute_revenue(snapshot.subscriptions, snapshot.plans),
        user_growth=compute_user_growth(users, now, settings.new_user_window_days),
        expiring_soon=len(find_expiring_soon(users, now, settings.expiry_warning_days)),
    )


def aggregate(snapshot: AdminSnapshot, now: Optional[datetime] = None) -> AdminAggregate:
    now = as_utc(now) if now else datetime.now(timezone.utc)
    users = combine_users(
        snapshot.profiles, snapshot.user_statuses, snapshot.subscriptions, snapshot.plans
    )
    return AdminAggregate(
        users=users,
        stats=compute_dashboard_stats(users, snapshot, now),
        plan_stats=compute_plan_stats(users, snapshot.plans),
        pending_requests=[r for r in snapshot.requests if r.status == "pending"],
        expiring_users=find_expiring_soon(users, now, settings.expiry_warning_days),
        plans=snapshot.plans,
        exchange_rates=snapshot.exchange_rates,
        generated_at=now,
    )
