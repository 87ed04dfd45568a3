"""
Security helpers.
Password hashing (bcrypt) and JWT issuance/verification (PyJWT).
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import bcrypt
import jwt

from .config import get_settings

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


def hash_password(plain: str) -> str:
    """Hash a plain-text password with bcrypt."""
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode()


def verify_password(plain: str, hashed: str) -> bool:
    """Check a plain-text password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False


def _create_token(subject: str, role: str, kind: str, expires_delta: timedelta) -> str:
    settings = get_settings()
    now = datetime.utcnow()
    payload = {
        "sub": subject,
        "type": role,
        "kind": kind,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def access_token_lifetime() -> timedelta:
    return timedelta(minutes=get_settings().access_token_expire_minutes)


def refresh_token_lifetime() -> timedelta:
    return timedelta(days=get_settings().refresh_token_expire_days)


def create_access_token(subject: str, role: str) -> str:
    """Create a short-lived access token for the given account and role."""
    return _create_token(subject, role, ACCESS, access_token_lifetime())


def create_refresh_token(subject: str, role: str) -> str:
    """Create a long-lived refresh token for the given account and role."""
    return _create_token(subject, role, REFRESH, refresh_token_lifetime())


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and verify a JWT.

    Returns:
        The token payload, or None when the signature, expiry or format is invalid.
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None


def issue_token_pair(subject: str, role: str) -> Dict[str, Any]:
    """
    Issue a fresh access/refresh pair.

    Returns:
        Dict shaped like AuthorizationToken (access, refresh, expired_at, refreshable_until)
    """
    now = datetime.utcnow()
    return {
        "access": create_access_token(subject, role),
        "refresh": create_refresh_token(subject, role),
        "expired_at": now + access_token_lifetime(),
        "refreshable_until": now + refresh_token_lifetime(),
    }
