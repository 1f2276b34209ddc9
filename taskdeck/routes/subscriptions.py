from fastapi import APIRouter, Depends

from taskdeck.auth.deps import get_current_user
from taskdeck.billing.plans import catalog_as_dict, plan_details
from taskdeck.models.user import User
from taskdeck.schemas.subscriptions import CurrentSubscriptionOut, PlansOut

router = APIRouter(tags=["subscriptions"])

@router.get("/plans", response_model=PlansOut, response_model_exclude_none=True)
@router.get(
    "/subscriptions/plans", response_model=PlansOut, response_model_exclude_none=True, include_in_schema=False
)
def list_plans() -> dict:
    return {"plans": catalog_as_dict()}

@router.get("/subscriptions/current", response_model=CurrentSubscriptionOut)
def current_subscription(user: User = Depends(get_current_user)) -> dict:
    return {
        "subscription": {
            "plan": user.plan,
            "status": user.subscription_status,
            "current_period_end": user.current_period_end,
            "plan_details": plan_details(user.plan),
        }
    }
