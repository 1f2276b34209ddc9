"""Keyword-driven task suggestions.

A static decision table: each rule list is checked in order and the first
rule whose keywords appear in the lowercased title + description wins. The
three tables are evaluated independently.
"""
from __future__ import annotations

from taskdeck.models.enums import TaskPriority

PRIORITY_RULES: tuple[tuple[tuple[str, ...], TaskPriority, str], ...] = (
    (("urgent", "asap", "emergency"), TaskPriority.urgent, "Contains urgent keywords - consider high priority"),
    (("important", "critical"), TaskPriority.high, "Contains important keywords - consider high priority"),
    (("later", "someday", "maybe"), TaskPriority.low, "Contains low-priority keywords - consider low priority"),
)
DEFAULT_PRIORITY = (TaskPriority.medium, "Standard task - medium priority recommended")

# minutes
TIME_RULES: tuple[tuple[tuple[str, ...], int], ...] = (
    (("meeting", "call"), 60),
    (("email", "message"), 15),
    (("research", "analysis"), 120),
    (("review", "check"), 30),
)
DEFAULT_TIME = 45

RELATED_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("project", ("Create project timeline", "Set up project tracking", "Schedule team meeting")),
    ("report", ("Gather data", "Create outline", "Review and edit")),
    ("presentation", ("Create slides", "Practice presentation", "Prepare Q&A")),
)

def _text(title: str, description: str | None) -> str:
    return f"{title} {description or ''}".lower()

def suggest_priority(text: str) -> tuple[TaskPriority, str]:
    for keywords, priority, reason in PRIORITY_RULES:
        if any(k in text for k in keywords):
            return priority, reason
    return DEFAULT_PRIORITY

def estimate_minutes(text: str) -> int:
    for keywords, minutes in TIME_RULES:
        if any(k in text for k in keywords):
            return minutes
    return DEFAULT_TIME

def related_tasks(text: str) -> list[str]:
    for keyword, tasks in RELATED_RULES:
        if keyword in text:
            return list(tasks)
    return []

def generate_suggestions(title: str, description: str | None = None) -> dict:
    text = _text(title, description)
    priority, reason = suggest_priority(text)
    return {
        "priority": priority,
        "priority_reason": reason,
        "estimated_time": estimate_minutes(text),
        "related_tasks": related_tasks(text),
    }
