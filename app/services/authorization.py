"""Authorization checks for role-gated and owner-only operations."""

import logging
from typing import Optional

from app.models.auth_models import Identity, Role, UserResponse
from app.models.problem_models import ProblemDetail
from app.services.store_interfaces import UserStore
from app.utils.errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)


def require_identity(identity: Optional[Identity]) -> Identity:
    """Fail with UnauthorizedError when no caller identity is present."""
    if identity is None:
        raise UnauthorizedError()
    return identity


async def authorize(
    identity: Optional[Identity],
    required_role: Role,
    users: UserStore,
    action: str = "perform this action",
) -> UserResponse:
    """
    Check that the caller's stored user record has the required role.

    Must run before any network call or store write of the guarded operation.
    """
    identity = require_identity(identity)
    user = await users.get_by_subject(identity.subject)
    if user is None or user.role != required_role:
        logger.warning(
            "Rejected %s: %s requires role %s",
            identity.subject,
            action,
            required_role.value,
        )
        raise ForbiddenError(f"Only {required_role.value}s can {action}")
    return user


def ensure_owner(identity: Identity, problem: ProblemDetail) -> None:
    """Only the creator of a problem may delete it."""
    if problem.createdBy != identity.subject:
        logger.warning(
            "Rejected %s: not the creator of problem %s", identity.subject, problem.id
        )
        raise ForbiddenError("You can only delete your own problems")
