"""
Centralized permission utilities for admin authorization.

Authentication itself (cookies, sessions, admin login) lives outside the
engine. The engine receives an opaque actor id and checks it here before any
admin-only operation. The check fails closed: a missing or unknown actor is
rejected.
"""

import logging

import config
from exceptions.common import UnauthorizedException

logger = logging.getLogger(__name__)


def is_admin_user(actor_id: int | None) -> bool:
    """
    Check if an actor is an admin.

    Args:
        actor_id: Opaque admin actor id supplied by the authentication layer

    Returns:
        True if actor is an admin, False otherwise

    Example:
        >>> is_admin_user(1)
        True
        >>> is_admin_user(None)
        False
    """
    if actor_id is None:
        return False
    return actor_id in config.ADMIN_ID_LIST


def require_admin(actor_id: int | None) -> int:
    """
    Ensure the actor is an admin.

    Returns:
        The verified actor id

    Raises:
        UnauthorizedException: If the actor is missing or not an admin
    """
    if not is_admin_user(actor_id):
        logger.warning(f"Rejected admin operation for actor {actor_id}")
        raise UnauthorizedException(actor_id)
    return actor_id
