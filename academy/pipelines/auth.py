"""
Auth pipeline functions.

Stateless orchestration logic for registration, login and profile edits.
"""

import logging
from typing import Any, Dict

from common.auth import JWTAuth
from common.utils import validate_password
from common.utils.exceptions import UnauthorizedException, ValidationException
from academy.services.user import UserService

logger = logging.getLogger(__name__)


async def _issue_token(jwt_auth: JWTAuth, user: dict) -> str:
    return await jwt_auth.create_token(str(user["_id"]), role=user.get("role", "student"))


async def register_pipeline(
    jwt_auth: JWTAuth,
    user_service: UserService,
    name: str,
    email: str,
    password: str,
) -> Dict[str, Any]:
    """
    Orchestrates account registration.

    Returns:
        dict with token and user

    Raises:
        ValidationException: Weak password
        ConflictException: Email already registered
    """
    is_valid, errors = validate_password(password, require_special=True)
    if not is_valid:
        raise ValidationException(
            message="Password does not meet requirements",
            code="WEAK_PASSWORD",
            errors=[{"field": "password", "message": error} for error in errors],
        )

    user = await user_service.create_user(
        name=name,
        email=email,
        password_hash=jwt_auth.hash_password(password),
    )

    token = await _issue_token(jwt_auth, user)
    logger.info(f"User registered: {user['_id']}")

    return {"token": token, "user": user_service.format_user(user)}


async def login_pipeline(
    jwt_auth: JWTAuth,
    user_service: UserService,
    email: str,
    password: str,
) -> Dict[str, Any]:
    """
    Orchestrates login.

    Raises:
        UnauthorizedException: Unknown email or wrong password
    """
    user = await user_service.get_user_by_email(email)

    if not user or not jwt_auth.verify_password(password, user.get("passwordHash", "")):
        logger.warning(f"Failed login attempt for {email}")
        raise UnauthorizedException(
            message="Invalid email or password",
            code="INVALID_CREDENTIALS",
        )

    await user_service.update_last_login(user["_id"])
    token = await _issue_token(jwt_auth, user)
    logger.info(f"User logged in: {user['_id']}")

    return {"token": token, "user": user_service.format_user(user)}


async def update_profile_pipeline(
    user_service: UserService,
    user: dict,
    changes: Dict[str, Any],
) -> Dict[str, Any]:
    """Update the caller's own name, email or avatar."""
    allowed = {key: value for key, value in changes.items() if key in ("name", "email", "avatar")}
    updated = await user_service.update_user(str(user["_id"]), allowed)
    return user_service.format_user(updated)
