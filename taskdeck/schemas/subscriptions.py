from datetime import datetime

from taskdeck.models.enums import Plan, SubscriptionStatus
from taskdeck.schemas.common import CamelModel

class PlanOut(CamelModel):
    name: str
    price: float
    price_id: str | None = None
    features: list[str]

class PlansOut(CamelModel):
    plans: dict[str, PlanOut]

class SubscriptionOut(CamelModel):
    plan: Plan
    status: SubscriptionStatus
    current_period_end: datetime | None
    plan_details: PlanOut

class CurrentSubscriptionOut(CamelModel):
    subscription: SubscriptionOut
