import hashlib
import hmac
import secrets
import uuid
from datetime import datetime, timedelta, timezone

import jwt

from taskdeck.config import settings

ALGORITHM = "HS256"

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

# sqlite hands datetimes back naive; everything stored is utc
def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt

def access_token_lifetime() -> timedelta:
    return timedelta(minutes=settings.jwt_expires_minutes)

def issue_access_token(user_id: str | uuid.UUID, expires_in: timedelta | None = None) -> str:
    """Sign a bearer token whose subject is the user id.

    A negative ``expires_in`` yields an already expired token.
    """
    issued = now_utc()
    expires = issued + (access_token_lifetime() if expires_in is None else expires_in)
    claims = {
        "sub": str(user_id),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=ALGORITHM)

def decode_access_token(token: str) -> dict:
    # raises jwt.PyJWTError on a bad signature, expiry, issuer or audience
    return jwt.decode(
        token,
        key=settings.jwt_secret,
        algorithms=[ALGORITHM],
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        options={"require": ["sub", "exp"]},
    )

def new_magic_token() -> str:
    return secrets.token_urlsafe(32)

def hash_magic_token(token: str) -> str:
    pepper = settings.magic_link_pepper.encode("utf-8")
    return hmac.new(pepper, token.encode("utf-8"), hashlib.sha256).hexdigest()

def magic_link_expiry() -> datetime:
    return now_utc() + timedelta(minutes=settings.magic_link_expires_minutes)
