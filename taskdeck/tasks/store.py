"""Owner-scoped task queries.

Every lookup filters on ``Task.user_id`` in the same statement as the id, so a
task owned by someone else is indistinguishable from a missing one.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from taskdeck.models.enums import TaskPriority, TaskStatus
from taskdeck.models.task import Task
from taskdeck.schemas.tasks import TaskCreateIn

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"
TITLE_REQUIRED = "Task title is required"

SORT_FIELDS = {
    "createdAt": Task.created_at,
    "created_at": Task.created_at,
    "updatedAt": Task.updated_at,
    "updated_at": Task.updated_at,
    "dueDate": Task.due_date,
    "due_date": Task.due_date,
    "title": Task.title,
    "status": Task.status,
    "priority": Task.priority,
}

NON_NULLABLE = frozenset({"title", "status", "priority"})

def _parse_id(task_id: str | uuid.UUID) -> uuid.UUID | None:
    if isinstance(task_id, uuid.UUID):
        return task_id
    try:
        return uuid.UUID(str(task_id))
    except ValueError:
        return None

def list_tasks(
    db: Session,
    user_id: uuid.UUID,
    *,
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> list[Task]:
    column = SORT_FIELDS.get(sort_by)
    if column is None:
        raise HTTPException(status_code=400, detail=f"Cannot sort by '{sort_by}'")

    q = select(Task).where(Task.user_id == user_id)
    if status is not None:
        q = q.where(Task.status == status)
    if priority is not None:
        q = q.where(Task.priority == priority)

    q = q.order_by(column.asc() if sort_order == "asc" else column.desc())
    return list(db.scalars(q).all())

def create_task(db: Session, user_id: uuid.UUID, payload: TaskCreateIn) -> Task:
    if not payload.title or not payload.title.strip():
        raise HTTPException(status_code=400, detail=TITLE_REQUIRED)

    t = Task(
        user_id=user_id,
        title=payload.title,
        description=payload.description,
        priority=payload.priority or TaskPriority.medium,
        due_date=payload.due_date,
        tags=list(payload.tags or []),
    )
    db.add(t)
    db.commit()
    db.refresh(t)
    logger.info("task created id=%s user=%s", t.id, user_id)
    return t

def get_owned_task(db: Session, user_id: uuid.UUID, task_id: str | uuid.UUID) -> Task:
    tid = _parse_id(task_id)
    if tid is None:
        raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)

    t = db.scalar(select(Task).where(Task.id == tid, Task.user_id == user_id))
    if t is None:
        raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)
    return t

def update_task(db: Session, task: Task, changes: dict[str, Any]) -> Task:
    """Apply a partial update.

    ``changes`` holds only the fields the caller sent. A key mapped to ``None``
    clears a nullable field; a missing key leaves the field alone.
    """
    for field in NON_NULLABLE & changes.keys():
        if changes[field] is None:
            raise HTTPException(status_code=400, detail=f"{field} cannot be null")
    if "title" in changes and not changes["title"].strip():
        raise HTTPException(status_code=400, detail=TITLE_REQUIRED)

    for field, value in changes.items():
        if field == "tags":
            value = list(value or [])
        setattr(task, field, value)

    db.add(task)
    db.commit()
    db.refresh(task)
    return task

def delete_task(db: Session, user_id: uuid.UUID, task_id: str | uuid.UUID) -> None:
    t = get_owned_task(db, user_id, task_id)
    db.delete(t)
    db.commit()
    logger.info("task deleted id=%s user=%s", t.id, user_id)
