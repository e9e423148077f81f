"""Access token verification for the hosted auth service.

Sign-in, sessions and token refresh happen entirely in the hosted auth
service. The API only verifies the short-lived access token it issues
(HS256 JWT signed with AUTH_JWT_SECRET) and trusts its ``sub`` claim as the
user id.

Provides the ``UserId`` dependency, which raises 401 when the token is
missing or invalid.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from jose import ExpiredSignatureError, JWTError, jwt

from core.config import get_settings
from core.logger import get_logger
from core.wide_event import set_wide_event_fields

logger = get_logger(__name__)

_BEARER_PREFIX = "bearer "


def _extract_bearer_token(req: Request) -> str | None:
    header = req.headers.get("authorization", "")
    if not header.lower().startswith(_BEARER_PREFIX):
        return None
    token = header[len(_BEARER_PREFIX) :].strip()
    return token or None


def decode_access_token(token: str) -> dict:
    """Verify signature, expiry and audience. Raises JWTError on failure."""
    settings = get_settings()
    return jwt.decode(
        token,
        settings.auth_jwt_secret,
        algorithms=[settings.auth_jwt_algorithm],
        audience=settings.auth_jwt_audience,
    )


def get_user_id_from_request(req: Request) -> str | None:
    """Get authenticated user ID, or None.

    Note: Intentionally synchronous - HS256 verification is CPU-bound.
    """
    token = _extract_bearer_token(req)
    if token is None:
        return None

    try:
        claims = decode_access_token(token)
    except ExpiredSignatureError:
        set_wide_event_fields(auth_error="token_expired")
        return None
    except JWTError as e:
        # Invalid tokens are expected traffic; record on the request, don't log
        set_wide_event_fields(auth_error="token_invalid", auth_error_reason=str(e))
        return None

    subject = claims.get("sub")
    return subject if isinstance(subject, str) and subject else None


def require_auth(request: Request) -> str:
    """Raises 401 if not authenticated. Sets request.state.user_id."""
    user_id = get_user_id_from_request(request)
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")

    request.state.user_id = user_id
    set_wide_event_fields(user_id=user_id)
    return user_id


UserId = Annotated[str, Depends(require_auth)]
