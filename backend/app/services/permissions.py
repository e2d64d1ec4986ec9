"""
RedSocial Backend — Ownership Checks
======================================

What:  The single authorization rule of the API: a caller may only act
       on behalf of itself.
Who:   FollowService, PublicationService, CommentService and UserService
       call ensure_acting_user() before any mutation.
"""

import logging

from app.exceptions import ForbiddenError
from app.schemas.auth import Identity

logger = logging.getLogger(__name__)


def ensure_acting_user(actor: Identity, user_id: int, action: str) -> None:
    """
    Raise ForbiddenError unless `actor` is the user identified by `user_id`.

    Args:
        actor:   Identity resolved from the request's bearer token
        user_id: The user the request claims to act for (path parameter)
        action:  Short description used in the error message and log line
    """
    if actor.user_id != user_id:
        logger.warning(
            "Forbidden: user %d (%s) tried to %s on behalf of user %d",
            actor.user_id,
            actor.username,
            action,
            user_id,
        )
        raise ForbiddenError(
            message=f"Not allowed to {action} on behalf of another user",
            context={"actor_id": actor.user_id, "user_id": user_id},
        )
