from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskdeck.billing.gates import require_plan
from taskdeck.db import get_db
from taskdeck.models.enums import Plan
from taskdeck.models.user import User
from taskdeck.schemas.analytics import UserStatsOut
from taskdeck.tasks.analytics import user_stats

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/stats", response_model=UserStatsOut)
def stats(
    user: User = Depends(require_plan(Plan.pro)),
    db: Session = Depends(get_db),
) -> dict:
    return user_stats(db, user)
