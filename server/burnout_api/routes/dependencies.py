"""Shared request dependencies."""
from typing import Optional

from fastapi import Header


async def current_user(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """User id from the X-User-Id header; None means a guest on this device."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None
