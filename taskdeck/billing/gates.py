import logging

from fastapi import Depends, HTTPException

from taskdeck.auth.deps import get_current_user
from taskdeck.billing.plans import plan_allows
from taskdeck.models.enums import Plan
from taskdeck.models.user import User

logger = logging.getLogger(__name__)

def enforce_plan(user: User, required: Plan) -> None:
    current = Plan(user.plan)
    if plan_allows(current, required):
        return

    logger.info("plan gate denied user=%s current=%s required=%s", user.id, current.value, required.value)
    raise HTTPException(
        status_code=403,
        detail={
            "message": f"This feature requires a {required.value} subscription",
            "currentPlan": current.value,
            "requiredPlan": required.value,
        },
    )

def require_plan(required: Plan | str):
    required = Plan(required)

    def _checker(user: User = Depends(get_current_user)) -> User:
        enforce_plan(user, required)
        return user

    return _checker
