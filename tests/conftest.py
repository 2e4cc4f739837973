"""
Pytest configuration and fixtures for testing
"""
import copy
from datetime import datetime, timezone

import pytest

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Just enough of the postgrest builder: select/upsert/update/delete + eq/order/limit."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self._order = None
        self._limit = None

    def select(self, columns="*"):
        self.op = "select"
        self.columns = columns
        return self

    def upsert(self, record, on_conflict=None):
        self.op = "upsert"
        self.payload = record
        self.on_conflict = on_conflict
        return self

    def update(self, patch):
        self.op = "update"
        self.payload = patch
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matches(self, row):
        return all(str(row.get(c)) == str(v) for c, v in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.op, copy.deepcopy(self.payload)))
        if (self.table, self.op) in self.db.failures:
            raise Exception(f"{self.op} on {self.table} failed")
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "select":
            result = [r for r in rows if self._matches(r)]
            if self._order:
                column, desc = self._order
                result = sorted(result, key=lambda r: (r.get(column) is None, str(r.get(column))), reverse=desc)
            if self._limit is not None:
                result = result[:self._limit]
            return FakeResponse(copy.deepcopy(result))

        if self.op == "upsert":
            key = self.on_conflict or "id"
            record = dict(self.payload)
            for row in rows:
                if key in record and row.get(key) == record[key]:
                    row.update(record)
                    return FakeResponse([copy.deepcopy(row)])
            record.setdefault("id", f"{self.table}-{len(rows) + 1}")
            rows.append(record)
            return FakeResponse([copy.deepcopy(record)])

        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)

        removed = [r for r in rows if self._matches(r)]
        self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
        return FakeResponse(copy.deepcopy(removed))


class FakeSupabase:
    def __init__(self, tables=None):
        self.tables = copy.deepcopy(tables or {})
        self.failures = set()
        self.calls = []

    def table(self, name):
        return FakeQuery(self, name)

    def fail(self, table, op):
        self.failures.add((table, op))

    def writes(self):
        return [c for c in self.calls if c[1] != "select"]

    def row(self, table, **match):
        for r in self.tables.get(table, []):
            if all(r.get(k) == v for k, v in match.items()):
                return r
        return None


SEED = {
    "profiles": [
        {"id": "admin", "full_name": "Root Admin", "email": "root@example.com", "role": "superadmin",
         "created_at": "2026-01-01T00:00:00+00:00"},
        {"id": "u1", "full_name": "Alice Perera", "email": "alice@example.com", "role": "user",
         "created_at": "2026-09-20T08:00:00+00:00"},
        {"id": "u2", "full_name": "Bob Silva", "email": "bob@corp.io", "role": "user",
         "created_at": "2026-08-15T08:00:00+00:00"},
        {"id": "u3", "full_name": "Carol Fernando", "email": "carol@example.com", "role": "user",
         "created_at": "2026-09-25T08:00:00+00:00"},
    ],
    "user_status": [
        {"user_id": "u1", "is_active": True},
        {"user_id": "u2", "is_active": False},
    ],
    "plans": [
        {"id": "plan-free", "name": "Free", "price": 0, "currency": "LKR", "features": {"max_accounts": 2}},
        {"id": "plan-std", "name": "Standard", "price": 1500, "currency": "LKR", "features": {"max_accounts": 5}},
        {"id": "plan-pro", "name": "Pro", "price": 3500, "currency": "LKR", "features": {"max_accounts": 15}},
    ],
    "subscriptions": [
        {"id": "s1", "user_id": "u1", "plan_id": "plan-pro", "status": "active",
         "current_period_start": "2026-09-05T00:00:00+00:00",
         "current_period_end": "2026-10-05T00:00:00+00:00"},
        {"id": "s2", "user_id": "u2", "plan_id": "plan-std", "status": "expired",
         "current_period_start": "2026-07-01T00:00:00+00:00",
         "current_period_end": "2026-08-01T00:00:00+00:00"},
    ],
    "subscription_requests": [
        {"id": "r1", "user_id": "u3", "plan_id": "plan-pro", "status": "pending",
         "requested_at": "2026-09-28T10:00:00+00:00", "resolved_at": None,
         "profiles": {"full_name": "Carol Fernando", "email": "carol@example.com"},
         "plans": {"name": "Pro"}},
        {"id": "r2", "user_id": "u2", "plan_id": "plan-pro", "status": "rejected",
         "requested_at": "2026-08-10T10:00:00+00:00", "resolved_at": "2026-08-11T10:00:00+00:00",
         "profiles": {"full_name": "Bob Silva", "email": "bob@corp.io"},
         "plans": {"name": "Pro"}},
    ],
    "exchange_rates": [
        {"id": 1, "from_currency": "USD", "to_currency": "LKR", "rate": 295.0, "rate_date": "2026-09-30"},
    ],
}


@pytest.fixture
def fake_db():
    return FakeSupabase(SEED)


@pytest.fixture
def clock():
    return lambda: NOW


def make_snapshot(tables=None):
    from app.modules.admin.schemas import (
        AdminSnapshot, ExchangeRate, Plan, Profile, Subscription, SubscriptionRequest, UserStatus
    )
    tables = tables or SEED
    return AdminSnapshot(
        profiles=[Profile(**r) for r in tables["profiles"]],
        user_statuses=[UserStatus(**r) for r in tables["user_status"]],
        subscriptions=[Subscription(**r) for r in tables["subscriptions"]],
        plans=[Plan(**r) for r in tables["plans"]],
        requests=[SubscriptionRequest(**r) for r in tables["subscription_requests"]],
        exchange_rates=[ExchangeRate(**r) for r in tables["exchange_rates"]],
        fetched_at=NOW,
    )


@pytest.fixture
def snapshot():
    return make_snapshot()
