"""Admin authorization dependency."""

from fastapi import Depends

from eventhub.dependencies.auth import get_access_guard
from eventhub.services.auth import AccessGuard, SessionClaims


def get_admin_claims(guard: AccessGuard = Depends(get_access_guard)) -> SessionClaims:
    """Require admin privileges.

    Args:
        guard: The request's access guard.

    Returns:
        The verified claims of the admin caller.

    Raises:
        UnauthorizedError: If no valid credential was presented.
        ForbiddenError: If the caller is not an admin.
    """
    return guard.require_admin()
