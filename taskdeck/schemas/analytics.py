from datetime import datetime

from taskdeck.models.enums import TaskPriority, TaskStatus
from taskdeck.schemas.common import CamelModel

class PriorityCount(CamelModel):
    priority: TaskPriority
    count: int

class StatusCount(CamelModel):
    status: TaskStatus
    count: int

class TrendPoint(CamelModel):
    date: str
    count: int

class TaskAnalyticsOut(CamelModel):
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    completion_rate: float
    tasks_by_priority: list[PriorityCount]
    tasks_by_status: list[StatusCount]
    completion_trend: list[TrendPoint]

class UserStatsOut(CamelModel):
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    completion_rate: float
    tasks_by_priority: list[PriorityCount]
    recent_tasks: int
    member_since: datetime
    last_login: datetime | None
