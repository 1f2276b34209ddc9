import uuid
from dataclasses import dataclass, field
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from taskdeck.auth.tokens import issue_access_token, now_utc
from taskdeck.db import SessionLocal
from taskdeck.models.enums import Plan, SubscriptionStatus, TaskPriority, TaskStatus
from taskdeck.models.task import Task
from taskdeck.models.user import User

SAMPLE_TASKS = (
    ("Urgent email to client", TaskPriority.urgent, TaskStatus.open, ["inbox"]),
    ("Quarterly report", TaskPriority.high, TaskStatus.in_progress, ["work"]),
    ("Team meeting prep", TaskPriority.medium, TaskStatus.completed, ["work", "meetings"]),
    ("Read that book someday", TaskPriority.low, TaskStatus.open, []),
)

@dataclass
class SeedResult:
    # plan -> (email, user id)
    accounts: dict[Plan, tuple[str, uuid.UUID]] = field(default_factory=dict)
    task_ids: list[uuid.UUID] = field(default_factory=list)

def get_or_create_user(db: Session, email: str, plan: Plan) -> User:
    email = email.lower().strip()
    u = db.scalar(select(User).where(User.email == email))
    if u is None:
        u = User(email=email, name=plan.value)
        db.add(u)
    u.plan = plan
    u.subscription_status = SubscriptionStatus.none if plan == Plan.free else SubscriptionStatus.active
    u.current_period_end = None if plan == Plan.free else now_utc() + timedelta(days=30)
    db.flush()
    return u

def get_or_create_task(
    db: Session,
    user_id: uuid.UUID,
    title: str,
    priority: TaskPriority,
    status: TaskStatus,
    tags: list[str],
) -> Task:
    t = db.scalar(select(Task).where(Task.user_id == user_id, Task.title == title))
    if t is None:
        t = Task(user_id=user_id, title=title, priority=priority, status=status, tags=tags)
        db.add(t)
        db.flush()
    return t

def seed() -> SeedResult:
    result = SeedResult()
    db = SessionLocal()
    try:
        users = [get_or_create_user(db, f"{plan.value}@example.com", plan) for plan in Plan]
        for user in users:
            for title, priority, status, tags in SAMPLE_TASKS:
                result.task_ids.append(get_or_create_task(db, user.id, title, priority, status, tags).id)

        db.commit()
        result.accounts = {u.plan: (u.email, u.id) for u in users}
        return result
    finally:
        db.close()

if __name__ == "__main__":
    r = seed()
    print("seed complete")
    print(f"tasks: {len(r.task_ids)}")
    print("users:")
    for plan, (email, user_id) in r.accounts.items():
        print(f"  {plan.value:<10} {email}")
        print(f"  {'':<10} token={issue_access_token(user_id)}")
