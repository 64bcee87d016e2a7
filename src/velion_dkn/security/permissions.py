from __future__ import annotations

from velion_dkn.auth.security import Principal
from velion_dkn.exceptions import AuthorizationError

REVIEWER_REQUIRED = "Only Knowledge Champions can review documents"
PENDING_REQUIRES_REVIEWER = "Only Knowledge Champions can access pending documents"
OWNER_REQUIRED = "You can only delete your own documents"


def is_reviewer(principal: Principal | None) -> bool:
    return bool(principal and principal.is_reviewer)


def require_reviewer(principal: Principal | None, message: str = REVIEWER_REQUIRED) -> Principal:
    """Single reviewer capability check; raises ``AuthorizationError``."""
    if principal is None or not principal.is_reviewer:
        raise AuthorizationError(message)
    return principal


def require_uploader(requesting_user_id: int, uploader_id: int) -> None:
    if requesting_user_id != uploader_id:
        raise AuthorizationError(OWNER_REQUIRED)


__all__ = [
    "REVIEWER_REQUIRED",
    "PENDING_REQUIRES_REVIEWER",
    "OWNER_REQUIRED",
    "is_reviewer",
    "require_reviewer",
    "require_uploader",
]
