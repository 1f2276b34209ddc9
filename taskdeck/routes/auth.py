from __future__ import annotations

import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from taskdeck.auth import tokens
from taskdeck.config import settings
from taskdeck.db import get_db
from taskdeck.models.auth_magic_link import AuthMagicLink
from taskdeck.models.user import User
from taskdeck.ratelimit import rate_limit
from taskdeck.schemas.auth import AccessTokenOut, RedeemIn, RequestLinkIn, RequestLinkOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

def _find_or_create_user(db: Session, email: str, name: str | None) -> User:
    user = db.scalar(select(User).where(User.email == email))
    if user is None:
        user = User(email=email, name=name)
        db.add(user)
        db.flush()
        logger.info("created user id=%s on first sign-in", user.id)
    elif name and not user.name:
        user.name = name
    return user

def _claim_link(db: Session, raw_token: str, now: datetime) -> uuid.UUID:
    """Mark a magic link used and return its user id.

    The update only matches an unused, unexpired row, so two concurrent
    redeems of the same token cannot both succeed.
    """
    token_hash = tokens.hash_magic_token(raw_token)
    user_id = db.scalar(
        update(AuthMagicLink)
        .where(
            AuthMagicLink.token_hash == token_hash,
            AuthMagicLink.used_at.is_(None),
            AuthMagicLink.expires_at > now,
        )
        .values(used_at=now)
        .returning(AuthMagicLink.user_id)
        .execution_options(synchronize_session=False)
    )
    if user_id is not None:
        return user_id

    link = db.get(AuthMagicLink, token_hash)
    if link is not None and link.used_at is not None:
        raise HTTPException(status_code=400, detail="Token already used")
    if link is not None and tokens.as_utc(link.expires_at) <= now:
        raise HTTPException(status_code=400, detail="Token expired")
    raise HTTPException(status_code=400, detail="Invalid token")

@router.post("/request-link", response_model=RequestLinkOut)
def request_link(
    payload: RequestLinkIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:request_link",
            limit_per_window=settings.rate_limit_auth_request_link_per_min,
            window_seconds=60,
        )
    ),
) -> RequestLinkOut:
    user = _find_or_create_user(db, payload.email.strip().lower(), payload.name)

    raw = tokens.new_magic_token()
    db.add(
        AuthMagicLink(
            token_hash=tokens.hash_magic_token(raw),
            user_id=user.id,
            expires_at=tokens.magic_link_expiry(),
        )
    )
    db.commit()
    logger.info("magic link issued for user=%s", user.id)

    # no mailer: prod gets a link to hand off, everything else sees the token
    if settings.app_env == "prod":
        return RequestLinkOut(link=f"{settings.base_url}/auth/redeem?token={raw}")
    return RequestLinkOut(token=raw)

@router.post("/redeem", response_model=AccessTokenOut)
def redeem(
    payload: RedeemIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:redeem",
            limit_per_window=settings.rate_limit_auth_redeem_per_min,
            window_seconds=60,
        )
    ),
) -> AccessTokenOut:
    now = tokens.now_utc()
    user_id = _claim_link(db, payload.token.strip(), now)

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid token")

    user.last_login = now
    db.commit()
    logger.info("user signed in id=%s", user.id)

    return AccessTokenOut(
        access_token=tokens.issue_access_token(user.id),
        expires_in=int(tokens.access_token_lifetime().total_seconds()),
    )
