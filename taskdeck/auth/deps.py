import logging
import uuid
from dataclasses import dataclass

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.orm import Session, defer

from taskdeck.auth.tokens import decode_access_token
from taskdeck.db import get_db
from taskdeck.models.user import User

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)

MISSING_TOKEN = "No token, authorization denied"
INVALID_TOKEN = "Token is not valid"

@dataclass(frozen=True)
class AuthResult:
    """Outcome of resolving a bearer token: a user, or the reason there is none."""

    user: User | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.user is not None

def verify_token(db: Session, token: str | None) -> AuthResult:
    if not token:
        return AuthResult(reason=MISSING_TOKEN)

    try:
        payload = decode_access_token(token)
        user_id = uuid.UUID(str(payload["sub"]))
    except (jwt.PyJWTError, KeyError, ValueError) as e:
        logger.warning("rejected bearer token: %s", e.__class__.__name__)
        return AuthResult(reason=INVALID_TOKEN)

    user = db.scalar(select(User).options(defer(User.password_hash)).where(User.id == user_id))
    if user is None:
        logger.warning("bearer token for unknown user %s", user_id)
        return AuthResult(reason=INVALID_TOKEN)

    return AuthResult(user=user)

def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if creds is None or creds.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail=MISSING_TOKEN)

    result = verify_token(db, creds.credentials)
    if not result.ok:
        raise HTTPException(status_code=401, detail=result.reason)

    return result.user
