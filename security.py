import logging
import re
import secrets
from datetime import timedelta
from typing import Optional

from bson import ObjectId
from fastapi import Header, HTTPException
from werkzeug.security import check_password_hash, generate_password_hash

from config import Config
from database import create_document, db, utcnow
from schemas import Session

logger = logging.getLogger(__name__)

PASSWORD_RULE = "Password must be at least 8 characters long and contain uppercase, lowercase, and numbers"
_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{8,}$")


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def is_strong_password(password: Optional[str]) -> bool:
    return bool(password) and bool(_PASSWORD_RE.match(password))


def sanitize(value):
    if not isinstance(value, str):
        return value
    return value.strip().replace("<", "").replace(">", "")


# ---------- Bearer sessions ----------

def issue_token(user_id: str) -> str:
    token = secrets.token_urlsafe(32)
    session = Session(
        token=token,
        userId=user_id,
        expires_at=utcnow() + timedelta(hours=Config.SESSION_TTL_HOURS),
    )
    create_document("session", session)
    return token


def revoke_token(token: str) -> None:
    db["session"].delete_one({"token": token})


def new_reset_token():
    """Return (token, expiry) for a single-use password reset."""
    return secrets.token_hex(32), utcnow() + timedelta(minutes=Config.RESET_TOKEN_TTL_MINUTES)


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def current_user(authorization: Optional[str] = Header(default=None)) -> dict:
    """Resolve the bearer token to the user document, or 401."""
    token = _bearer(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")
    if db is None:
        raise HTTPException(status_code=500, detail="Database not available")
    session = db["session"].find_one({"token": token, "expires_at": {"$gt": utcnow()}})
    if not session:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    try:
        user = db["user"].find_one({"_id": ObjectId(session["userId"])})
    except Exception:
        user = None
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user["token"] = token
    return user


def require_roles(*roles):
    """Dependency factory: only users whose role is in `roles` get through."""
    def checker(authorization: Optional[str] = Header(default=None)) -> dict:
        user = current_user(authorization)
        if user.get("role") not in roles:
            logger.warning(f"User {user.get('username')} with role {user.get('role')} denied, needs one of {roles}")
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user
    return checker
