import uuid
from datetime import datetime

from pydantic import Field, field_validator

from taskdeck.models.enums import TaskPriority, TaskStatus
from taskdeck.models.task import TITLE_MAX_LENGTH
from taskdeck.schemas.common import CamelModel

class _DueDateIn(CamelModel):
    due_date: datetime | None = None

    @field_validator("due_date", mode="before")
    @classmethod
    def blank_due_date(cls, v):
        # "" means no due date
        if isinstance(v, str) and not v.strip():
            return None
        return v

class TaskCreateIn(_DueDateIn):
    # presence is checked by the store so a missing title is a plain 400
    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    priority: TaskPriority | None = None
    tags: list[str] | None = None

class TaskUpdateIn(_DueDateIn):
    """Partial update; only fields present in the body are applied (see model_fields_set)."""

    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    tags: list[str] | None = None

class TaskOut(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None
    tags: list[str]
    created_at: datetime
    updated_at: datetime

class TaskListOut(CamelModel):
    tasks: list[TaskOut]

class TaskDetailOut(CamelModel):
    task: TaskOut

class TaskEnvelopeOut(TaskDetailOut):
    message: str

class SuggestionIn(CamelModel):
    title: str | None = None
    description: str | None = None

class SuggestionsOut(CamelModel):
    priority: TaskPriority
    priority_reason: str
    estimated_time: int
    related_tasks: list[str]

class SuggestionsEnvelopeOut(CamelModel):
    suggestions: SuggestionsOut
