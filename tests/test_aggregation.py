"""
Tests for the join and summary arithmetic over one snapshot.
"""
import copy
from datetime import timedelta

from app.modules.admin.aggregation import (
    aggregate,
    combine_users,
    compute_plan_stats,
    compute_revenue,
    compute_user_growth,
    count_new_users,
    find_expiring_soon,
    plan_distribution,
    signups_by_month,
)
from tests.conftest import NOW, SEED, make_snapshot


def _users(snapshot):
    return combine_users(snapshot.profiles, snapshot.user_statuses, snapshot.subscriptions, snapshot.plans)


def test_combine_users_excludes_superadmin_and_applies_defaults(snapshot):
    users = {u.id: u for u in _users(snapshot)}

    assert set(users) == {"u1", "u2", "u3"}
    assert users["u1"].is_active is True
    assert users["u1"].plan_id == "plan-pro"
    assert users["u1"].plan_name == "Pro"
    assert users["u2"].is_active is False
    assert users["u2"].status == "expired"
    # No user_status and no subscription row
    assert users["u3"].is_active is True
    assert users["u3"].status == "none"
    assert users["u3"].plan_id == "plan-free"
    assert users["u3"].subscription_id is None


def test_combine_users_keeps_profile_order(snapshot):
    assert [u.id for u in _users(snapshot)] == ["u1", "u2", "u3"]


def test_null_columns_fall_back_to_defaults():
    tables = copy.deepcopy(SEED)
    tables["user_status"].append({"user_id": "u3", "is_active": None})
    tables["subscriptions"].append({"id": "s3", "user_id": "u3", "plan_id": None, "status": None})
    tables["subscription_requests"][0]["status"] = None
    snapshot = make_snapshot(tables)

    carol = [u for u in _users(snapshot) if u.id == "u3"][0]
    assert carol.is_active is True
    assert carol.status == "none"
    assert carol.plan_id == "plan-free"
    assert aggregate(snapshot, NOW).stats.pending_requests == 0


def test_first_subscription_wins_on_duplicates():
    tables = copy.deepcopy(SEED)
    tables["subscriptions"].append(
        {"id": "s3", "user_id": "u1", "plan_id": "plan-free", "status": "cancelled"}
    )
    users = _users(make_snapshot(tables))

    assert len(users) == 3
    alice = [u for u in users if u.id == "u1"]
    assert len(alice) == 1
    assert alice[0].status == "active"
    assert alice[0].plan_id == "plan-pro"


def test_revenue_counts_every_subscription_regardless_of_status(snapshot):
    # active Pro + expired Standard
    assert compute_revenue(snapshot.subscriptions, snapshot.plans) == 5000.0


def test_revenue_changes_by_price_difference_when_plan_changes():
    tables = copy.deepcopy(SEED)
    before = make_snapshot(tables)
    tables["subscriptions"][1]["plan_id"] = "plan-pro"
    after = make_snapshot(tables)

    delta = compute_revenue(after.subscriptions, after.plans) - compute_revenue(before.subscriptions, before.plans)
    assert delta == 3500 - 1500


def test_revenue_ignores_unknown_plans(snapshot):
    subs = list(snapshot.subscriptions)
    subs.append(subs[0].model_copy(update={"plan_id": "plan-gone"}))
    assert compute_revenue(subs, snapshot.plans) == 5000.0


def test_new_users_and_growth(snapshot):
    users = _users(snapshot)
    assert count_new_users(users, NOW, 30) == 2
    # two signups this window against one in the previous window
    assert compute_user_growth(users, NOW, 30) == 100.0


def test_new_users_ignore_future_signups(snapshot):
    users = _users(snapshot)
    future = users[0].model_copy(update={"id": "u9", "created_at": NOW + timedelta(days=2)})

    assert count_new_users(users + [future], NOW, 30) == count_new_users(users, NOW, 30)
    assert compute_user_growth(users + [future], NOW, 30) == compute_user_growth(users, NOW, 30)


def test_growth_is_none_without_previous_window(snapshot):
    users = [u for u in _users(snapshot) if u.id != "u2"]
    assert compute_user_growth(users, NOW, 30) is None


def test_expiring_soon_only_active_within_window(snapshot):
    users = _users(snapshot)
    assert [u.id for u in find_expiring_soon(users, NOW, 7)] == ["u1"]
    assert find_expiring_soon(users, NOW, 3) == []
    assert find_expiring_soon(users, NOW + timedelta(days=10), 7) == []


def test_plan_stats_revenue_is_active_count_times_price(snapshot):
    stats = {p.plan_id: p for p in compute_plan_stats(_users(snapshot), snapshot.plans)}

    assert stats["plan-pro"].users == 1
    assert stats["plan-pro"].active == 1
    assert stats["plan-pro"].revenue == 3500
    assert stats["plan-std"].expired == 1
    assert stats["plan-std"].revenue == 0
    assert stats["plan-free"].users == 1
    assert stats["plan-free"].active == 0


def test_chart_series_inputs(snapshot):
    users = _users(snapshot)
    assert plan_distribution(users, snapshot.plans) == {"Free": 1, "Standard": 1, "Pro": 1}

    months = signups_by_month(users, NOW, 6)
    assert list(months) == ["2026-05", "2026-06", "2026-07", "2026-08", "2026-09", "2026-10"]
    assert months["2026-09"] == 2
    assert months["2026-08"] == 1


def test_aggregate_dashboard_stats(snapshot):
    agg = aggregate(snapshot, NOW)
    stats = agg.stats

    assert stats.total_users == 3
    assert stats.active_users == 2
    assert stats.inactive_users == 1
    assert stats.new_users == 2
    assert stats.active_subscriptions == 1
    assert stats.expired_subscriptions == 1
    assert stats.pending_requests == 1
    assert stats.revenue == 5000.0
    assert stats.user_growth == 100.0
    assert stats.expiring_soon == 1
    assert [r.id for r in agg.pending_requests] == ["r1"]
    assert agg.generated_at == NOW


def test_aggregate_empty_snapshot():
    from app.modules.admin.schemas import AdminSnapshot

    agg = aggregate(AdminSnapshot(), NOW)
    assert agg.users == []
    assert agg.stats.total_users == 0
    assert agg.stats.revenue == 0
    assert agg.stats.user_growth is None
