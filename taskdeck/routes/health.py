import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from taskdeck.db import check_db
from taskdeck.redis_client import check_redis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

@router.get("/health")
def health() -> dict:
    return {"status": "ok"}

@router.get("/ready")
def ready() -> JSONResponse:
    """200 when the database and redis both answer, 503 naming what failed."""
    failures = {name: err for name, err in (("db", check_db()), ("redis", check_redis())) if err}
    checks = {name: name not in failures for name in ("db", "redis")}

    if failures:
        logger.warning("not ready: %s", failures)
        return JSONResponse(
            status_code=503,
            content={"status": "unready", "checks": checks, "errors": failures},
        )
    return JSONResponse(status_code=200, content={"status": "ok", "checks": checks})
