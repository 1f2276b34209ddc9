from __future__ import annotations

import hmac
import hashlib
import json
import logging
import time
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskdeck.auth.tokens import now_utc
from taskdeck.billing.plans import plan_for_price
from taskdeck.config import settings
from taskdeck.db import get_db
from taskdeck.models.enums import Plan, SubscriptionStatus
from taskdeck.models.user import User
from taskdeck.models.webhook_event import WebhookEvent
from taskdeck.ratelimit import rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

_STRIPE_TOLERANCE_SECONDS = 300

_SUBSCRIPTION_EVENTS = {"customer.subscription.updated", "customer.subscription.deleted"}
_INVOICE_EVENTS = {"invoice.paid", "invoice.payment_failed"}

# statuses that keep a paid tier
_PAID_STATUSES = {SubscriptionStatus.active, SubscriptionStatus.trialing, SubscriptionStatus.past_due}

def _parse_signature(header: str) -> tuple[int, list[str]]:
    # header format: t=<unix ts>,v1=<hex>[,v1=<hex>...]
    timestamp: int | None = None
    candidates: list[str] = []
    for item in header.split(","):
        key, sep, value = item.strip().partition("=")
        if not sep:
            continue
        if key == "t" and timestamp is None:
            try:
                timestamp = int(value)
            except ValueError:
                raise HTTPException(status_code=400, detail="Invalid stripe-signature timestamp")
        elif key == "v1":
            candidates.append(value)

    if timestamp is None or not candidates:
        raise HTTPException(status_code=400, detail="Invalid stripe-signature format")
    return timestamp, candidates

def _verify_stripe_signature(body: bytes, header: str | None) -> None:
    secret = settings.STRIPE_WEBHOOK_SECRET
    if not secret:
        return
    if not header:
        raise HTTPException(status_code=400, detail="Missing stripe-signature")

    timestamp, candidates = _parse_signature(header)
    if abs(time.time() - timestamp) > _STRIPE_TOLERANCE_SECONDS:
        raise HTTPException(status_code=400, detail="Stale stripe-signature")

    mac = hmac.new(secret.encode("utf-8"), b"%d." % timestamp + body, hashlib.sha256)
    expected = mac.hexdigest()
    if not any(hmac.compare_digest(expected, c) for c in candidates):
        logger.warning("stripe signature mismatch")
        raise HTTPException(status_code=400, detail="Invalid stripe-signature")

def _find_user(
    db: Session,
    customer_id: str | None,
    sub_id: str | None,
    metadata: dict | None,
) -> User | None:
    if customer_id:
        user = db.scalar(select(User).where(User.stripe_customer_id == customer_id))
        if user:
            return user
    if sub_id:
        user = db.scalar(select(User).where(User.stripe_subscription_id == sub_id))
        if user:
            return user
    if metadata and isinstance(metadata, dict):
        raw_user_id = metadata.get("user_id")
        if raw_user_id:
            try:
                user_id = uuid.UUID(str(raw_user_id))
            except ValueError:
                return None
            return db.get(User, user_id)
    return None

def _map_stripe_sub_status(raw: str | None) -> SubscriptionStatus:
    try:
        return SubscriptionStatus(raw)
    except ValueError:
        return SubscriptionStatus.none

def _subscription_price_id(obj: dict) -> str | None:
    items = (obj.get("items") or {}).get("data") or []
    if not items:
        return None
    return (items[0].get("price") or {}).get("id")

def _paid_plan(user: User, price_id: str | None = None) -> Plan:
    # the price decides the tier; otherwise keep what the user has, pro at minimum
    plan = plan_for_price(price_id)
    if plan is not None:
        return plan
    return user.plan if user.plan != Plan.free else Plan.pro

def _period_end(raw) -> datetime | None:
    if raw is None:
        return None
    return datetime.fromtimestamp(int(raw), tz=timezone.utc)

def _finish(db: Session, ev: WebhookEvent, status: str, reason: str | None = None) -> dict:
    ev.status = status
    ev.processed_at = now_utc()
    db.commit()
    logger.info("stripe event %s (%s): %s%s", ev.event_id, ev.event_type, status, f" ({reason})" if reason else "")
    if status == "processed":
        return {"status": "ok", "event_id": ev.event_id}
    return {"status": "ignored", "reason": reason, "event_id": ev.event_id}

def _apply_subscription_event(user: User, event_type: str, obj: dict) -> None:
    if event_type == "customer.subscription.deleted":
        user.subscription_status = SubscriptionStatus.canceled
        user.plan = Plan.free
    else:
        sub_status = _map_stripe_sub_status(obj.get("status"))
        user.subscription_status = sub_status
        user.plan = _paid_plan(user, _subscription_price_id(obj)) if sub_status in _PAID_STATUSES else Plan.free

    period_end = _period_end(obj.get("current_period_end"))
    if period_end is not None:
        user.current_period_end = period_end
    user.stripe_subscription_id = obj.get("id") or user.stripe_subscription_id

def _apply_invoice_event(user: User, event_type: str, obj: dict) -> None:
    # if present, associate subscription id
    user.stripe_subscription_id = obj.get("subscription") or user.stripe_subscription_id
    user.plan = _paid_plan(user)
    if event_type == "invoice.paid":
        user.subscription_status = SubscriptionStatus.active
    else:
        user.subscription_status = SubscriptionStatus.past_due

def _ledger_entry(db: Session, event_id: str, event_type: str, payload: dict) -> WebhookEvent | None:
    """Row to process this delivery under, or None if the event is settled or in flight.

    The row is inserted first; the unique (provider, event_id) constraint
    decides between concurrent deliveries. A previously failed event is
    retried with the newly delivered body.
    """
    ev = WebhookEvent(provider="stripe", event_id=event_id, event_type=event_type, payload=payload)
    db.add(ev)
    try:
        db.commit()
        return ev
    except IntegrityError:
        db.rollback()

    ev = db.scalar(
        select(WebhookEvent).where(WebhookEvent.provider == "stripe", WebhookEvent.event_id == event_id)
    )
    # received means another delivery is processing it right now
    if ev is None or ev.status != "failed":
        return None
    ev.payload = payload
    return ev

def _process(db: Session, ev: WebhookEvent, event_type: str, obj) -> dict:
    if event_type not in _SUBSCRIPTION_EVENTS | _INVOICE_EVENTS:
        return _finish(db, ev, "ignored", "unhandled_type")
    if not isinstance(obj, dict):
        raise TypeError("stripe event data.object must be an object")

    customer = obj.get("customer")
    if not customer:
        return _finish(db, ev, "ignored", "missing_customer")

    is_subscription = event_type in _SUBSCRIPTION_EVENTS
    sub_id = obj.get("id") if is_subscription else obj.get("subscription")
    user = _find_user(db, customer, sub_id, obj.get("metadata"))
    if user is None:
        return _finish(db, ev, "ignored", "unknown_customer")

    if is_subscription:
        _apply_subscription_event(user, event_type, obj)
    else:
        _apply_invoice_event(user, event_type, obj)
    user.stripe_customer_id = user.stripe_customer_id or customer

    logger.info("user %s now on plan=%s status=%s", user.id, user.plan.value, user.subscription_status.value)
    return _finish(db, ev, "processed")

@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    db: Session = Depends(get_db),
    stripe_signature: str | None = Header(default=None, alias="stripe-signature"),
    _: None = Depends(
        rate_limit(
            "webhooks:stripe",
            limit_per_window=settings.rate_limit_webhooks_per_min,
            window_seconds=60,
        )
    ),
):
    body = await request.body()
    _verify_stripe_signature(body, stripe_signature)

    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise HTTPException(status_code=400, detail="Invalid JSON")

    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(payload, dict) or not payload.get("id") or not payload.get("type"):
        raise HTTPException(status_code=400, detail="Invalid stripe event")
    event_id, event_type = payload["id"], payload["type"]

    ev = _ledger_entry(db, event_id, event_type, payload)
    if ev is None:
        return {"status": "ignored", "reason": "duplicate", "event_id": event_id, "duplicate": True}

    try:
        return _process(db, ev, event_type, data.get("object") if isinstance(data, dict) else None)
    except Exception as e:
        # left as failed so stripe's redelivery of the same id is processed again
        db.rollback()
        ev.status = "failed"
        ev.error = f"{type(e).__name__}: {e}"[:1000]
        ev.processed_at = None
        db.commit()
        logger.exception("stripe event %s failed", event_id)
        raise HTTPException(status_code=500, detail="Webhook processing failed")
