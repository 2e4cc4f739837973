from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple, Any
import logging

from fastapi import HTTPException
from pydantic import ValidationError
from supabase import Client

from app.config import settings
from app.database.remote_client import RemoteDataClient, RemoteDataError, TableQuery
from app.modules.admin.aggregation import aggregate
from app.modules.admin.schemas import (
    AdminAggregate,
    AdminSnapshot,
    CombinedUser,
    ExchangeRate,
    MutationResponse,
    Plan,
    Profile,
    Subscription,
    SubscriptionEdit,
    SubscriptionRequest,
    UserStatus,
)
from app.modules.admin.state import AdminState, apply_snapshot, initial_state, record_error

logger = logging.getLogger(__name__)

SNAPSHOT_QUERIES = [
    TableQuery("profiles", order_by="created_at", desc=True),
    TableQuery("user_status"),
    TableQuery("subscriptions", "*, plans(*)"),
    TableQuery("plans", order_by="price"),
    TableQuery(
        "subscription_requests",
        "*, profiles(full_name, email), plans(name)",
        order_by="requested_at",
        desc=True,
    ),
    TableQuery("exchange_rates"),
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AdminService:
    def __init__(self, supabase: Client, clock: Callable[[], datetime] = utcnow):
        self.remote = RemoteDataClient(supabase)
        self.clock = clock

    # Fetch + aggregate

    async def load_snapshot(self) -> AdminSnapshot:
        """Read all six tables concurrently. Raises if any single read fails."""
        tables = await self.remote.fetch_all(SNAPSHOT_QUERIES)
        return AdminSnapshot(
            profiles=[Profile(**row) for row in tables["profiles"]],
            user_statuses=[UserStatus(**row) for row in tables["user_status"]],
            subscriptions=[Subscription(**row) for row in tables["subscriptions"]],
            plans=[Plan(**row) for row in tables["plans"]],
            requests=[SubscriptionRequest(**row) for row in tables["subscription_requests"]],
            exchange_rates=[ExchangeRate(**row) for row in tables["exchange_rates"]],
            fetched_at=self.clock(),
        )

    async def refresh(self, state: Optional[AdminState] = None) -> Tuple[AdminState, AdminAggregate]:
        """Discard local data, re-fetch everything and re-aggregate.

        A failed load keeps whatever snapshot the state already had (empty for
        a fresh state) and records the error instead of raising.
        """
        state = state or initial_state()
        try:
            snapshot = await self.load_snapshot()
            state = apply_snapshot(state, snapshot)
        except (RemoteDataError, ValidationError) as e:
            logger.error(f"Admin data load failed: {e}")
            state = record_error(state, f"Failed to load admin data: {e}")
        return state, aggregate(state.snapshot, self.clock())

    async def get_user(self, user_id: str) -> Tuple[AdminState, CombinedUser]:
        state, agg = await self.refresh()
        for user in agg.users:
            if user.id == user_id:
                return state, user
        raise HTTPException(status_code=404, detail="User not found")

    # Mutation workflows

    async def _finish(self, message: str, record: Optional[Dict[str, Any]] = None,
                      error: Optional[HTTPException] = None) -> MutationResponse:
        """Re-fetch after every write, whether it worked or not, then report."""
        state, agg = await self.refresh()
        if error is not None:
            raise error
        return MutationResponse(message=message, record=record, stats=agg.stats, refresh_error=state.last_error)

    @staticmethod
    def _require_confirmation(confirm: bool, action: str):
        if not confirm:
            raise HTTPException(status_code=400, detail=f"Please confirm before you {action} this request")

    def _get_pending_request(self, request_id: str) -> SubscriptionRequest:
        try:
            rows = self.remote.select("subscription_requests", filters={"id": request_id}, limit=1)
        except RemoteDataError as e:
            raise HTTPException(status_code=502, detail=f"Could not load request: {e.message}")
        if not rows:
            raise HTTPException(status_code=404, detail="Subscription request not found")
        request = SubscriptionRequest(**rows[0])
        if request.status != "pending":
            raise HTTPException(status_code=409, detail=f"Request is already {request.status or 'closed'}")
        return request

    async def approve_request(self, request_id: str, confirm: bool = False) -> MutationResponse:
        """pending -> approved, activating the requested plan for a fresh billing period.

        Two writes with no shared transaction: the subscription upsert, then the
        request status. If the second fails the first is compensated.
        """
        self._require_confirmation(confirm, "approve")
        request = self._get_pending_request(request_id)
        now = self.clock()
        error = None
        record = None
        try:
            previous = self.remote.select("subscriptions", filters={"user_id": request.user_id}, limit=1)
            record = {
                "user_id": request.user_id,
                "plan_id": request.plan_id,
                "status": "active",
                "current_period_start": now.isoformat(),
                "current_period_end": (now + timedelta(days=settings.subscription_period_days)).isoformat(),
                "updated_at": now.isoformat(),
            }
            self.remote.upsert("subscriptions", record, on_conflict="user_id")
            try:
                updated = self.remote.update(
                    "subscription_requests", "id", request.id,
                    {"status": "approved", "resolved_at": now.isoformat()},
                )
                if not updated:
                    raise RemoteDataError("subscription_requests", "update", "no rows updated")
            except RemoteDataError as e:
                error = self._compensate_subscription(request.user_id, previous, e)
            else:
                logger.info(f"Approved request {request.id}: user {request.user_id} -> {request.plan_id}")
        except RemoteDataError as e:
            logger.error(f"Error approving request {request.id}: {e}")
            error = HTTPException(status_code=502, detail=f"Failed to approve request: {e.message}")
        return await self._finish("Request approved", record, error)

    def _compensate_subscription(
        self,
        user_id: str,
        previous: List[Dict[str, Any]],
        cause: RemoteDataError,
    ) -> HTTPException:
        """Undo the subscription upsert after the request update failed."""
        logger.error(f"Request status write failed after subscription upsert for user {user_id}: {cause}")
        try:
            if previous:
                restored = {k: v for k, v in previous[0].items() if k != "plans"}
                self.remote.upsert("subscriptions", restored, on_conflict="user_id")
            else:
                self.remote.delete("subscriptions", "user_id", user_id)
        except RemoteDataError as e:
            logger.error(
                f"Rollback of subscription for user {user_id} failed, manual reconciliation required: {e}"
            )
            return HTTPException(
                status_code=502,
                detail=(
                    "Subscription was activated but the request could not be marked approved, "
                    "and the rollback failed. Reconcile this user manually."
                ),
            )
        logger.info(f"Rolled back subscription for user {user_id}")
        return HTTPException(
            status_code=502,
            detail=f"Failed to approve request: {cause.message}. The subscription change was rolled back.",
        )

    async def reject_request(self, request_id: str, confirm: bool = False) -> MutationResponse:
        """pending -> rejected. Subscriptions are not touched."""
        self._require_confirmation(confirm, "reject")
        request = self._get_pending_request(request_id)
        error = None
        record = None
        try:
            updated = self.remote.update(
                "subscription_requests", "id", request.id,
                {"status": "rejected", "resolved_at": self.clock().isoformat()},
            )
            if not updated:
                error = HTTPException(status_code=404, detail="Subscription request not found")
            else:
                record = updated[0]
                logger.info(f"Rejected request {request.id}")
        except RemoteDataError as e:
            error = HTTPException(status_code=502, detail=f"Failed to reject request: {e.message}")
        return await self._finish("Request rejected", record, error)

    async def toggle_user_active(self, user_id: str, current_is_active: bool) -> MutationResponse:
        """Write the inverse of the flag the admin was looking at.

        Upsert so users without a user_status row (read as active) get one.
        """
        error = None
        record = {"user_id": user_id, "is_active": not current_is_active}
        try:
            self.remote.upsert("user_status", record, on_conflict="user_id")
            logger.info(f"User {user_id} is_active -> {record['is_active']}")
        except RemoteDataError as e:
            error = HTTPException(status_code=502, detail=f"Failed to update user access: {e.message}")
        message = "User access granted" if record["is_active"] else "User access revoked"
        return await self._finish(message, record, error)

    async def edit_subscription(self, user_id: str, edit: SubscriptionEdit) -> MutationResponse:
        if edit.status == "none":
            raise HTTPException(status_code=422, detail="Choose a subscription status")
        try:
            plans = self.remote.select("plans", columns="id", filters={"id": edit.plan_id}, limit=1)
        except RemoteDataError as e:
            raise HTTPException(status_code=502, detail=f"Could not load plans: {e.message}")
        if not plans:
            raise HTTPException(status_code=422, detail=f"Unknown plan: {edit.plan_id}")

        error = None
        record = {
            "user_id": user_id,
            "plan_id": edit.plan_id,
            "status": edit.status,
            "updated_at": self.clock().isoformat(),
        }
        try:
            self.remote.upsert("subscriptions", record, on_conflict="user_id")
            logger.info(f"Subscription for user {user_id} set to {edit.plan_id}/{edit.status}")
        except RemoteDataError as e:
            error = HTTPException(status_code=502, detail=f"Failed to update subscription: {e.message}")
        return await self._finish("Subscription updated", record, error)
