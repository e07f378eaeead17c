"""
Common library for reusable infrastructure components.

This package provides generic modules that can be used across projects:

- database: Async MongoDB connection with Motor, timestamps, transactions
- auth: Pluggable authentication (JWT)
- utils: Standard responses, exceptions, ObjectId helpers, password validation
- config: Base settings class
"""

from common.database import MongoDB, transaction_scope
from common.auth import AuthProvider, JWTAuth
from common.utils import (
    success_response,
    error_response,
    paginated_response,
    APIException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
    validate_password,
)
from common.config import BaseAppSettings

__all__ = [
    # Database
    "MongoDB",
    "transaction_scope",
    # Auth
    "AuthProvider",
    "JWTAuth",
    # Utils
    "success_response",
    "error_response",
    "paginated_response",
    "APIException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ValidationException",
    "validate_password",
    # Config
    "BaseAppSettings",
]
