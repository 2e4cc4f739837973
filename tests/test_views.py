"""
Tests for the presentation builders and the dashboard state updates.
"""
import pytest

from app.modules.admin import views
from app.modules.admin.aggregation import aggregate
from app.modules.admin.schemas import UserFilters
from app.modules.admin.state import (
    apply_snapshot, begin_edit, cancel_edit, initial_state, record_error, select_tab, update_draft
)
from tests.conftest import NOW


@pytest.fixture
def agg(snapshot):
    return aggregate(snapshot, NOW)


def test_empty_filters_return_everything_in_order(agg):
    assert views.filter_users(agg.users, "", "all", "all") == agg.users


def test_search_matches_name_or_email_case_insensitive(agg):
    assert [u.id for u in views.filter_users(agg.users, search="ALICE")] == ["u1"]
    assert [u.id for u in views.filter_users(agg.users, search="corp.io")] == ["u2"]
    assert [u.id for u in views.filter_users(agg.users, search="example.com")] == ["u1", "u3"]


def test_plan_and_status_filters_combine_with_and(agg):
    assert [u.id for u in views.filter_users(agg.users, plan="plan-free")] == ["u3"]
    assert [u.id for u in views.filter_users(agg.users, status="inactive")] == ["u2"]
    assert [u.id for u in views.filter_users(agg.users, status="active")] == ["u1", "u3"]
    assert views.filter_users(agg.users, search="alice", plan="plan-std") == []
    assert [u.id for u in views.filter_users(agg.users, search="example", status="active", plan="plan-pro")] == ["u1"]


def test_user_table_rows_carry_actions(agg):
    table = views.build_user_table(agg.users, UserFilters(status="inactive"), agg.plans)

    assert table.total == 3
    assert len(table.rows) == 1
    row = table.rows[0]
    assert row.initial == "B"
    actions = {a.name: a.payload for a in row.actions}
    assert actions["toggle_status"] == {"user_id": "u2", "is_active": False}
    assert actions["edit"] == {"user_id": "u2", "plan_id": "plan-std", "status": "expired"}


def test_stat_cards_show_growth_trend(agg):
    cards = {c.key: c for c in views.build_stat_cards(agg.stats)}

    assert cards["total_users"].value == 3
    assert cards["total_users"].trend == "up"
    assert cards["total_users"].trend_value == "+100.0%"
    assert cards["revenue"].value == "LKR 5,000.00"
    assert cards["expiring_soon"].value == 1


def test_request_cards_only_pending(agg, snapshot):
    cards = views.build_request_cards(snapshot.requests)

    assert [c.request_id for c in cards] == ["r1"]
    assert cards[0].requester_name == "Carol Fernando"
    assert cards[0].plan_name == "Pro"
    assert {a.name for a in cards[0].actions} == {"approve", "reject"}


def test_expiry_widget_days_left(agg):
    widget = views.build_expiry_widget(agg.expiring_users, NOW)

    assert widget.window_days == 7
    assert len(widget.items) == 1
    assert widget.items[0].user_id == "u1"
    assert widget.items[0].days_left == 3


def test_subscription_table_totals(agg):
    table = views.build_subscription_table(agg.plan_stats)
    assert table.total_users == 3
    assert table.total_revenue == 3500


def test_insight_panel_per_tab(agg):
    assert views.build_insight_panel("users", agg).title == "User Directory"
    requests = views.build_insight_panel("requests", agg)
    assert requests.color == "amber"
    assert requests.insights[0] == "1 upgrade requests awaiting approval"
    rates = views.build_insight_panel("rates", agg)
    assert "Most recent rate dated 2026-09-30" in rates.insights


def test_support_tabs_use_overview_panel(agg):
    for tab in ("tickets", "logs"):
        panel = views.build_insight_panel(tab, agg)
        assert panel.title == "System Overview"
        assert panel.insights == ["3 users, 1 pending requests"]


def test_dashboard_renders_only_active_tab(agg, snapshot):
    state = select_tab(apply_snapshot(initial_state(), snapshot), "requests")
    view = views.build_dashboard(state, agg)

    assert view.active_tab == "requests"
    assert view.requests is not None
    assert view.users is None
    assert len(view.stat_cards) == 6
    assert {c.key for c in view.charts} == {"plan_distribution", "plan_revenue", "signups"}


def test_state_updates_return_new_states(agg, snapshot):
    state = initial_state()
    loaded = apply_snapshot(state, snapshot)
    assert state.snapshot.profiles == []
    assert len(loaded.snapshot.profiles) == 4

    failed = record_error(loaded, "boom")
    assert failed.last_error == "boom"
    assert failed.snapshot == loaded.snapshot
    assert apply_snapshot(failed, snapshot).last_error is None

    bob = [u for u in agg.users if u.id == "u2"][0]
    editing = begin_edit(loaded, bob)
    assert editing.edit_draft.plan_id == "plan-std"
    changed = update_draft(editing, plan_id="plan-pro", status="active")
    assert changed.edit_draft.plan_id == "plan-pro"
    assert editing.edit_draft.plan_id == "plan-std"
    assert cancel_edit(changed).edit_draft is None


def test_state_is_frozen():
    state = initial_state()
    with pytest.raises(Exception):
        state.active_tab = "rates"
