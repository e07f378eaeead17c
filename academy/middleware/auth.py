"""
Authentication middleware for protected routes.

Validates bearer tokens and attaches the user document to requests.
"""

import logging
from typing import Optional

from fastapi import Request

from common.auth import JWTAuth
from common.utils.exceptions import UnauthorizedException, ForbiddenException
from academy.services.user import UserService

logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    Middleware that validates a JWT and attaches the user to the request.
    """

    def __init__(self, jwt_auth: JWTAuth, user_service: UserService):
        """
        Initialize AuthMiddleware.

        Args:
            jwt_auth: For token verification
            user_service: For loading the token's user
        """
        self._jwt_auth = jwt_auth
        self._user_service = user_service

    async def require_auth(self, request: Request) -> dict:
        """
        Validate request is authenticated.

        Returns:
            User document attached to request.state.user

        Raises:
            UnauthorizedException: No header, invalid or expired token,
                or the token's user no longer exists
        """
        token = self._extract_token(request)

        if not token:
            raise UnauthorizedException(
                message="No token provided",
                code="AUTH_REQUIRED"
            )

        try:
            claims = await self._jwt_auth.verify_token(token)
        except ValueError as e:
            logger.debug(f"Token rejected: {e}")
            raise UnauthorizedException(
                message="Invalid or expired token",
                code="INVALID_TOKEN"
            )

        user = await self._user_service.get_user_by_id(claims["sub"])

        if not user:
            raise UnauthorizedException(
                message="User no longer exists",
                code="USER_NOT_FOUND"
            )

        request.state.user = user
        return user

    async def require_admin(self, request: Request) -> dict:
        """
        Validate request is authenticated as an admin.

        Raises:
            UnauthorizedException: See require_auth
            ForbiddenException: Authenticated user is not an admin
        """
        user = await self.require_auth(request)

        if user.get("role") != "admin":
            raise ForbiddenException(
                message="Admin access required",
                code="ADMIN_REQUIRED"
            )

        return user

    async def optional_auth(self, request: Request) -> Optional[dict]:
        """
        Attach user if authenticated, but don't require it.

        Does not raise errors for missing/invalid auth.
        """
        token = self._extract_token(request)

        if not token:
            return None

        try:
            claims = await self._jwt_auth.verify_token(token)
        except ValueError as e:
            logger.debug(f"Optional auth failed: {e}")
            return None

        user = await self._user_service.get_user_by_id(claims["sub"])
        if user:
            request.state.user = user
        return user

    def _extract_token(self, request: Request) -> Optional[str]:
        """
        Extract bearer token from Authorization header.

        Expected format: "Authorization: Bearer <token>"
        """
        auth_header = request.headers.get("Authorization")

        if not auth_header:
            return None

        parts = auth_header.split()

        if len(parts) != 2:
            return None

        scheme, token = parts

        if scheme.lower() != "bearer":
            return None

        return token
