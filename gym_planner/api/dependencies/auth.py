"""FastAPI dependency resolving the calling user.

Authentication happens upstream (gateway or session middleware), which
forwards the verified user ID in the X-User-Id header.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, status
from loguru import logger


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Return the authenticated user ID.

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        logger.warning("Request without user identity")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_user_id.strip()
