# file: MARKET/core/security.py
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from MARKET.core import config
from MARKET.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, CUSTOMERS, VENDORS
from MARKET.core.errors import AuthenticationError, AuthorizationError
from MARKET.core.firebase import get_db

# ---------------------------
# Logging
# ---------------------------
logger = logging.getLogger("core.security")

ROLES = {"customer", "vendor", "admin"}

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Authenticated identity handed explicitly to each handler."""

    subject_id: str
    role: str
    email: Optional[str] = None


# ---------------------------
# JWT Configuration
# ---------------------------
def get_secret_key() -> str:
    """Lazy-load the JWT secret from env, falling back to Firestore CONFIG/jwt."""
    if config.SECRET_KEY is None:
        snap = get_db().collection("CONFIG").document("jwt").get()
        if not snap.exists:
            raise RuntimeError("Missing CONFIG/jwt document in Firestore")

        data = snap.to_dict() or {}
        key = data.get("SECRET_KEY")
        if not key or len(key) < 32:
            raise RuntimeError("Invalid or missing SECRET_KEY in Firestore CONFIG/jwt")

        config.SECRET_KEY = key
        logger.info("Loaded SECRET_KEY from Firestore")
    return config.SECRET_KEY


# ---------------------------
# Token Creation / Decoding
# ---------------------------
def create_access_token(
    subject_id: str,
    role: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": subject_id, "role": role, "email": email, "exp": expire}
    return jwt.encode(payload, get_secret_key(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> AuthContext:
    try:
        payload = jwt.decode(token, get_secret_key(), algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning("JWT error: %s", str(e))
        raise AuthenticationError("Not authorized, token failed")

    subject_id = payload.get("sub")
    role = payload.get("role")
    if not subject_id or role not in ROLES:
        logger.warning("Invalid JWT payload: %s", payload)
        raise AuthenticationError("Invalid token payload")

    return AuthContext(subject_id=subject_id, role=role, email=payload.get("email"))


# ---------------------------
# Dependency: Current User (JWT only)
# ---------------------------
async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthContext:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")

    auth = decode_access_token(credentials.credentials)
    logger.debug("Auth path=%s subject=%s role=%s", request.url.path, auth.subject_id, auth.role)
    return auth


def _require_account(db, collection: str, auth: AuthContext) -> AuthContext:
    if not db.collection(collection).document(auth.subject_id).get().exists:
        logger.warning("Account not found in %s: %s", collection, auth.subject_id)
        raise AuthenticationError(f"Not authorized as {auth.role}")
    return auth


# ---------------------------
# Role-Based Dependencies
# ---------------------------
async def get_current_customer(
    auth: AuthContext = Depends(get_current_user),
    db=Depends(get_db),
) -> AuthContext:
    if auth.role != "customer":
        raise AuthorizationError("Customer access required")
    return _require_account(db, CUSTOMERS, auth)


async def get_current_vendor(
    auth: AuthContext = Depends(get_current_user),
    db=Depends(get_db),
) -> AuthContext:
    if auth.role != "vendor":
        raise AuthorizationError("Vendor access required")
    return _require_account(db, VENDORS, auth)


async def get_current_admin(auth: AuthContext = Depends(get_current_user)) -> AuthContext:
    if auth.role != "admin":
        raise AuthorizationError("Admin access required")
    return auth
