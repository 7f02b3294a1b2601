"""
JWT authentication utilities for the web API.

Access tokens are issued by the external identity provider and signed with
HS256 using the shared JWT_SECRET. A request is authenticated by an
`Authorization: Bearer <token>` header or, failing that, a `session` cookie.
The resulting CurrentUser is passed explicitly into core functions.
"""

from dataclasses import dataclass
from uuid import UUID

import jwt
from fastapi import HTTPException, Request

from codepath.config import get_jwt_audience, get_jwt_secret
from codepath.enums import UserRole

JWT_ALGORITHM = "HS256"


@dataclass(frozen=True)
class CurrentUser:
    user_id: UUID
    role: str = UserRole.student.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin.value


def verify_jwt(token: str) -> dict | None:
    """
    Verify and decode a JWT token.

    Args:
        token: The JWT token string

    Returns:
        Decoded payload dict if valid, None if invalid
    """
    secret = get_jwt_secret()
    if not secret:
        raise ValueError("JWT_SECRET environment variable not set")

    audience = get_jwt_audience()
    try:
        if audience:
            return jwt.decode(
                token, secret, algorithms=[JWT_ALGORITHM], audience=audience
            )
        return jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except jwt.InvalidTokenError:
        return None


def _role_from_claims(payload: dict) -> str:
    """Role from app_metadata, then user_metadata, defaulting to student."""
    for key in ("app_metadata", "user_metadata"):
        role = (payload.get(key) or {}).get("role")
        if role:
            return role
    return UserRole.student.value


def _extract_token(request: Request) -> str | None:
    authorization = request.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[len("bearer ") :].strip() or None
    return request.cookies.get("session")


def user_from_claims(payload: dict) -> CurrentUser | None:
    try:
        user_id = UUID(str(payload["sub"]))
    except (KeyError, ValueError):
        return None
    return CurrentUser(user_id=user_id, role=_role_from_claims(payload))


async def get_current_user(request: Request) -> CurrentUser:
    """
    FastAPI dependency to get the current authenticated user.

    Raises:
        HTTPException: 401 if not authenticated or invalid token
    """
    token = _extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = verify_jwt(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = user_from_claims(payload)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


def require_self(user: CurrentUser, user_id: UUID) -> None:
    """Raise 403 unless the requester is asking about their own data."""
    if user.user_id != user_id:
        raise HTTPException(status_code=403, detail="Not authorized")


def require_admin(user: CurrentUser) -> None:
    """Raise 403 unless the requester has the admin role."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Not authorized")
