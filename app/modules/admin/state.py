"""
Dashboard application state.

AdminState is immutable; every change goes through one of the update
functions below, which return a new state. Routes build a fresh state per
request and pass it down to the view builders.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.modules.admin.schemas import (
    AdminSnapshot,
    AdminTab,
    CombinedUser,
    SubscriptionEditDraft,
)


class AdminState(BaseModel):
    model_config = ConfigDict(frozen=True)

    snapshot: AdminSnapshot = AdminSnapshot()
    active_tab: AdminTab = "users"
    edit_draft: Optional[SubscriptionEditDraft] = None
    last_error: Optional[str] = None


def initial_state() -> AdminState:
    return AdminState()


def apply_snapshot(state: AdminState, snapshot: AdminSnapshot) -> AdminState:
    """Replace the snapshot wholesale and clear any previous load error."""
    return state.model_copy(update={"snapshot": snapshot, "last_error": None})


def record_error(state: AdminState, message: str) -> AdminState:
    """Keep the current (possibly stale or empty) snapshot and remember the failure."""
    return state.model_copy(update={"last_error": message})


def select_tab(state: AdminState, tab: AdminTab) -> AdminState:
    return state.model_copy(update={"active_tab": tab})


def draft_for(user: CombinedUser) -> SubscriptionEditDraft:
    """Edit draft seeded from the user's current subscription."""
    status = user.status if user.status in ("active", "trial", "expired", "cancelled", "none") else "none"
    return SubscriptionEditDraft(user_id=user.id, plan_id=user.plan_id, status=status)


def begin_edit(state: AdminState, user: CombinedUser) -> AdminState:
    draft = draft_for(user)
    return state.model_copy(update={"edit_draft": draft})


def update_draft(state: AdminState, plan_id: Optional[str] = None, status: Optional[str] = None) -> AdminState:
    if state.edit_draft is None:
        return state
    changes = {}
    if plan_id is not None:
        changes["plan_id"] = plan_id
    if status is not None:
        changes["status"] = status
    draft = SubscriptionEditDraft(**{**state.edit_draft.model_dump(), **changes})
    return state.model_copy(update={"edit_draft": draft})


def cancel_edit(state: AdminState) -> AdminState:
    return state.model_copy(update={"edit_draft": None})
