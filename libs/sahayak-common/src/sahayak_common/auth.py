"""Client API key authentication for sahayak services.

The key is optional: when ``SAHAYAK_API_KEY`` is unset every request is
accepted (development mode). End-user identity is not handled here; callers
pass it through as an opaque ``userId``.
"""

from __future__ import annotations

import os
from typing import Annotated

from fastapi import Depends, HTTPException, Request


def _get_api_key() -> str | None:
    """Get the client API key from environment."""
    return os.environ.get("SAHAYAK_API_KEY")


def _extract_bearer_token(authorization: str | None) -> str | None:
    """Extract token from Authorization: Bearer <token> header."""
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


async def require_api_key(request: Request) -> None:
    """FastAPI dependency that validates the client API key.

    Accepts ``Authorization: Bearer <key>`` or an ``apikey`` header.
    """
    api_key = _get_api_key()
    if not api_key:
        return

    token = _extract_bearer_token(request.headers.get("authorization")) or request.headers.get("apikey")
    if token != api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


ClientAPIKey = Annotated[None, Depends(require_api_key)]
