"""
Utilities module - Common helpers for API responses, exceptions, and validation.
"""

from common.utils.responses import success_response, error_response, paginated_response
from common.utils.exceptions import (
    APIException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    ValidationException,
    ServerException,
    InternalServerException,
)
from common.utils.object_id import to_object_id, serialize
from common.utils.password import validate_password

__all__ = [
    "success_response",
    "error_response",
    "paginated_response",
    "APIException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "ValidationException",
    "ServerException",
    "InternalServerException",
    "to_object_id",
    "serialize",
    "validate_password",
]
