from enum import Enum

# declaration order is the tier order, see billing.plans
class Plan(str, Enum):
    free = "free"
    pro = "pro"
    enterprise = "enterprise"

class SubscriptionStatus(str, Enum):
    none = "none"
    incomplete = "incomplete"
    trialing = "trialing"
    active = "active"
    past_due = "past_due"
    canceled = "canceled"
    unpaid = "unpaid"

class TaskStatus(str, Enum):
    open = "open"
    in_progress = "in_progress"
    completed = "completed"

class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"
