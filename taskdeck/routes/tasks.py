import logging
from enum import Enum

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from taskdeck.auth.deps import get_current_user
from taskdeck.billing.gates import require_plan
from taskdeck.config import settings
from taskdeck.db import get_db
from taskdeck.models.enums import Plan, TaskPriority, TaskStatus
from taskdeck.models.user import User
from taskdeck.ratelimit import rate_limit
from taskdeck.schemas.analytics import TaskAnalyticsOut
from taskdeck.schemas.common import MessageOut
from taskdeck.schemas.tasks import (
    SuggestionIn,
    SuggestionsEnvelopeOut,
    TaskCreateIn,
    TaskDetailOut,
    TaskEnvelopeOut,
    TaskListOut,
    TaskOut,
    TaskUpdateIn,
)
from taskdeck.tasks import store
from taskdeck.tasks.analytics import task_summary
from taskdeck.tasks.suggestions import generate_suggestions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])

def _filter_value(enum_cls: type[Enum], raw: str | None, name: str):
    # empty query values mean "no filter"
    if not raw:
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name} '{raw}'")

@router.get("", response_model=TaskListOut)
def list_tasks(
    status: str | None = None,
    priority: str | None = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskListOut:
    rows = store.list_tasks(
        db,
        user.id,
        status=_filter_value(TaskStatus, status, "status"),
        priority=_filter_value(TaskPriority, priority, "priority"),
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return TaskListOut(tasks=[TaskOut.model_validate(r) for r in rows])

@router.post("", response_model=TaskEnvelopeOut, status_code=201)
def create_task(
    payload: TaskCreateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskEnvelopeOut:
    t = store.create_task(db, user.id, payload)
    return TaskEnvelopeOut(message="Task created successfully", task=TaskOut.model_validate(t))

@router.post("/ai-suggestions", response_model=SuggestionsEnvelopeOut)
def ai_suggestions(
    payload: SuggestionIn,
    user: User = Depends(require_plan(Plan.pro)),
    _: None = Depends(
        rate_limit(
            "tasks:ai_suggestions",
            limit_per_window=settings.rate_limit_suggestions_per_min,
            window_seconds=60,
            per_user=True,
        )
    ),
) -> dict:
    if not payload.title or not payload.title.strip():
        raise HTTPException(status_code=400, detail="Task title is required for AI suggestions")

    return {"suggestions": generate_suggestions(payload.title, payload.description)}

@router.get("/analytics", response_model=TaskAnalyticsOut)
def analytics(
    user: User = Depends(require_plan(Plan.pro)),
    db: Session = Depends(get_db),
) -> dict:
    return task_summary(db, user.id)

@router.get("/{task_id}", response_model=TaskDetailOut)
def get_task(
    task_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskDetailOut:
    t = store.get_owned_task(db, user.id, task_id)
    return TaskDetailOut(task=TaskOut.model_validate(t))

@router.put("/{task_id}", response_model=TaskEnvelopeOut)
def update_task(
    task_id: str,
    payload: TaskUpdateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskEnvelopeOut:
    t = store.get_owned_task(db, user.id, task_id)

    # only what the client sent; explicit nulls survive, omitted keys don't
    changes = payload.model_dump(exclude_unset=True)
    t = store.update_task(db, t, changes)
    return TaskEnvelopeOut(message="Task updated successfully", task=TaskOut.model_validate(t))

@router.delete("/{task_id}", response_model=MessageOut)
def delete_task(
    task_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageOut:
    store.delete_task(db, user.id, task_id)
    return MessageOut(message="Task deleted successfully")
