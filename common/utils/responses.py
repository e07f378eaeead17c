"""
Standard API response helpers.

Every response uses the same envelope:
    {"success": bool, "message"?: str, "data"?: Any, "errors"?: list}

Example:
    from common.utils import success_response, error_response

    @app.get("/users/{id}")
    async def get_user(id: str):
        user = await users.find_one({"_id": ObjectId(id)})
        if not user:
            return JSONResponse(
                status_code=404,
                content=error_response("User not found", code="USER_NOT_FOUND")
            )
        return success_response({"user": user}, message="User retrieved")
"""

import math
from typing import Any, Optional, Dict


def success_response(
    data: Any = None,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a standard success response.

    Args:
        data: The response data (can be dict, list, or any serializable type)
        message: Optional success message

    Returns:
        Dictionary with success=True and optional data/message
    """
    response: Dict[str, Any] = {"success": True}

    if message:
        response["message"] = message

    if data is not None:
        response["data"] = data

    return response


def error_response(
    message: str,
    code: Optional[str] = None,
    details: Optional[Any] = None,
    errors: Optional[list] = None,
) -> Dict[str, Any]:
    """
    Create a standard error response.

    Args:
        message: Human-readable error message
        code: Machine-readable error code (e.g., "USER_NOT_FOUND")
        details: Additional error details
        errors: List of specific errors (for validation errors)

    Returns:
        Dictionary with success=False and error info
    """
    response: Dict[str, Any] = {"success": False, "message": message}

    if code:
        response["code"] = code

    if details is not None:
        response["details"] = details

    if errors:
        response["errors"] = errors

    return response


def paginated_response(
    items: list,
    total: int,
    page: int = 1,
    limit: int = 10,
    key: str = "items",
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a paginated success response.

    The items and pagination metadata are nested under data so the
    envelope keeps its shape.

    Args:
        items: List of items for current page
        total: Total number of items across all pages
        page: Current page number (1-indexed)
        limit: Items per page
        key: Name of the items list inside data
        message: Optional success message

    Returns:
        Dictionary with success=True and data={key: items, pagination: {...}}
    """
    pages = math.ceil(total / limit) if limit > 0 else 0

    return success_response(
        {
            key: items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": pages,
            },
        },
        message=message,
    )
