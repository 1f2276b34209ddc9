"""Read-only aggregates over one user's tasks."""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from taskdeck.auth.tokens import now_utc
from taskdeck.config import settings
from taskdeck.models.enums import TaskStatus
from taskdeck.models.task import Task
from taskdeck.models.user import User

def completion_rate(completed: int, total: int) -> float:
    if total == 0:
        return 0
    return round(completed / total * 100, 1)

def _count(db: Session, user_id: uuid.UUID, *where) -> int:
    q = select(func.count()).select_from(Task).where(Task.user_id == user_id, *where)
    return db.scalar(q) or 0

def _counts(db: Session, user_id: uuid.UUID) -> dict:
    total = _count(db, user_id)
    completed = _count(db, user_id, Task.status == TaskStatus.completed)
    # own query: statuses other than open/completed must not be inferred
    pending = _count(db, user_id, Task.status != TaskStatus.completed)
    return {
        "total_tasks": total,
        "completed_tasks": completed,
        "pending_tasks": pending,
        "completion_rate": completion_rate(completed, total),
    }

def count_by(db: Session, user_id: uuid.UUID, column: InstrumentedAttribute, key: str) -> list[dict]:
    q = (
        select(column, func.count())
        .where(Task.user_id == user_id)
        .group_by(column)
        .order_by(column)
    )
    return [{key: value, "count": n} for value, n in db.execute(q).all()]

def utc_day(column, dialect_name: str):
    """Calendar day of a timestamp column, taken in UTC.

    Postgres would otherwise use the session TimeZone for timestamptz;
    sqlite stores the utc wall time already.
    """
    if dialect_name == "postgresql":
        column = func.timezone("UTC", column)
    return func.date(column)

def completion_trend(db: Session, user_id: uuid.UUID, since: datetime) -> list[dict]:
    day = utc_day(Task.updated_at, db.get_bind().dialect.name).label("day")
    q = (
        select(day, func.count())
        .where(
            Task.user_id == user_id,
            Task.status == TaskStatus.completed,
            Task.updated_at >= since,
        )
        .group_by(day)
        .order_by(day)
    )
    # postgres hands back a date, sqlite a string; both print as YYYY-MM-DD
    return [{"date": str(d), "count": n} for d, n in db.execute(q).all()]

def task_summary(db: Session, user_id: uuid.UUID, now: datetime | None = None) -> dict:
    now = now or now_utc()
    summary = _counts(db, user_id)
    summary["tasks_by_priority"] = count_by(db, user_id, Task.priority, "priority")
    summary["tasks_by_status"] = count_by(db, user_id, Task.status, "status")
    summary["completion_trend"] = completion_trend(
        db, user_id, now - timedelta(days=settings.analytics_trend_days)
    )
    return summary

def user_stats(db: Session, user: User, now: datetime | None = None) -> dict:
    now = now or now_utc()
    stats = _counts(db, user.id)
    stats["tasks_by_priority"] = count_by(db, user.id, Task.priority, "priority")
    stats["recent_tasks"] = _count(
        db, user.id, Task.created_at >= now - timedelta(days=settings.stats_recent_days)
    )
    stats["member_since"] = user.created_at
    stats["last_login"] = user.last_login
    return stats
