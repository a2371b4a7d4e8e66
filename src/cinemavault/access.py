"""Role checks for administrator-only operations.

Identity and role are resolved upstream; the core only compares them.
"""

from cinemavault.exceptions import Forbidden

ADMIN_ROLE = "admin"
USER_ROLE = "user"


def is_admin(role) -> bool:
    return role == ADMIN_ROLE


def require_admin(role, action: str) -> None:
    if not is_admin(role):
        raise Forbidden(f"Access denied. Admin privileges required to {action}.", role=role)
