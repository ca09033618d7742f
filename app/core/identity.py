"""Caller identity.

Authentication is handled upstream; the proxy in front of the API forwards
the authenticated user's stable id in a request header.
"""

from fastapi import HTTPException, Request

from app.core.config import settings


def get_current_user_id(request: Request) -> str:
    """Dependency returning the authenticated user id, or 401."""
    user_id = request.headers.get(settings.identity_header, "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id
