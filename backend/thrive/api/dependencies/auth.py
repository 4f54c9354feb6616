# backend/thrive/api/dependencies/auth.py
"""
Caller identity.

Authentication happens at the gateway in front of this service, which
forwards the authenticated user's ULID in the X-User-ID header.
"""

from typing import Optional

from fastapi import Header, HTTPException, status

from ...core.ulid_helper import is_valid_ulid


def get_current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-ID")) -> str:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authenticated user",
        )
    if not is_valid_ulid(x_user_id):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authenticated user id",
        )
    return x_user_id
