"""Request identity helpers.

Authentication is handled upstream; requests name their owner through the
``X-User-Id`` header and fall back to the configured local user.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Header, HTTPException, status

from ...services.config import get_config

MAX_OWNER_ID_LENGTH = 128


def get_owner_id(
    x_user_id: Annotated[Optional[str], Header(alias="X-User-Id")] = None,
) -> str:
    """Return the acting owner ID for the request."""
    if x_user_id is None:
        return get_config().local_user_id

    owner_id = x_user_id.strip()
    if not owner_id or len(owner_id) > MAX_OWNER_ID_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_owner",
                "message": f"X-User-Id must be 1-{MAX_OWNER_ID_LENGTH} characters",
            },
        )
    return owner_id


__all__ = ["get_owner_id"]
