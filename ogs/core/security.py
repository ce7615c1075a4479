"""
Bearer token handling.

Tokens are issued by the identity service; this module only needs to mint
them for tooling and tests and to verify them on every request.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional

import jwt

from .config import settings
from .exceptions import InvalidTokenError, TokenExpiredError
from .logging import get_logger

logger = get_logger(__name__)


class TokenType(str, Enum):
    ACCESS = "access"


class Permission(str, Enum):
    """Permission strings carried in the token's ``permissions`` claim."""
    ATTENDANCE_READ = "attendance:read"
    ATTENDANCE_CHECKIN = "attendance:checkin"
    ATTENDANCE_CHECKOUT = "attendance:checkout"
    GROUP_READ = "group:read"
    GROUP_CREATE = "group:create"
    GROUP_UPDATE = "group:update"
    GROUP_ASSIGN = "group:assign"
    ADMIN = "admin:*"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as described by a verified token."""

    account_id: int
    permissions: FrozenSet[str] = field(default_factory=frozenset)

    def has_permission(self, permission: str) -> bool:
        return Permission.ADMIN.value in self.permissions or permission in self.permissions


class TokenManager:
    """JWT token creation and verification"""

    @staticmethod
    def create_token(
        account_id: int,
        permissions: Iterable[str] = (),
        expires_delta: Optional[timedelta] = None,
        token_type: TokenType = TokenType.ACCESS,
    ) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=settings.security.ACCESS_TOKEN_EXPIRE_MINUTES))
        payload: Dict[str, Any] = {
            "sub": str(account_id),
            "permissions": sorted(permissions),
            "type": token_type.value,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, settings.security.SECRET_KEY, algorithm=settings.security.JWT_ALGORITHM)

    @staticmethod
    def verify_token(token: str, token_type: TokenType = TokenType.ACCESS) -> Principal:
        """
        Raises:
            TokenExpiredError: The token is past its expiry
            InvalidTokenError: Bad signature, wrong type or malformed claims
        """
        try:
            payload = jwt.decode(
                token,
                settings.security.SECRET_KEY,
                algorithms=[settings.security.JWT_ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError()
        except jwt.InvalidTokenError as e:
            logger.info("Rejected bearer token", reason=type(e).__name__)
            raise InvalidTokenError(reason=type(e).__name__)

        if payload.get("type", TokenType.ACCESS.value) != token_type.value:
            raise InvalidTokenError(reason="wrong_token_type")

        try:
            account_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise InvalidTokenError(reason="invalid_subject")

        permissions = payload.get("permissions") or []
        if not isinstance(permissions, list):
            raise InvalidTokenError(reason="invalid_permissions_claim")

        return Principal(account_id=account_id, permissions=frozenset(str(p) for p in permissions))


create_access_token = TokenManager.create_token
verify_token = TokenManager.verify_token
