"""Shared FastAPI dependencies."""

import secrets

from fastapi import Header, HTTPException

from streakboard.config import get_settings


async def require_admin(x_admin_token: str | None = Header(None)) -> None:
    """Allow the request only with the configured X-Admin-Token.

    Admin endpoints are disabled (503) while no token is configured.
    """
    expected = get_settings().admin_token
    if not expected:
        raise HTTPException(status_code=503, detail="Admin endpoints are not configured")
    if not x_admin_token or not secrets.compare_digest(x_admin_token, expected):
        raise HTTPException(status_code=403, detail="Invalid admin token")
