"""
FastAPI Dependencies

Authentication and permission checks shared by the API routers.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .exceptions import AuthenticationError, AuthorizationError
from .logging import account_id as account_id_ctx
from .security import Principal, verify_token

# auto_error=False so a missing header is reported as 401, not 403
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """Verify the bearer token and return the caller."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")

    principal = verify_token(credentials.credentials)
    account_id_ctx.set(str(principal.account_id))
    return principal


def require_permission(permission: str):
    """
    Dependency factory requiring a permission claim.

    Usage:
        @router.post("/...")
        def handler(principal: Principal = Depends(require_permission("attendance:checkin"))):
            ...
    """
    async def permission_dependency(
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        if not principal.has_permission(permission):
            raise AuthorizationError(
                f"Missing permission: {permission}",
                required_permission=permission,
            )
        return principal

    return permission_dependency
