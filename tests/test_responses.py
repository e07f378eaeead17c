"""Unit tests for the response envelope and exception helpers."""

import pytest
from bson import ObjectId
from datetime import datetime, timezone

from common.utils import (
    BadRequestException,
    ConflictException,
    error_response,
    paginated_response,
    serialize,
    success_response,
    to_object_id,
)


def test_success_response_omits_empty_fields():
    assert success_response() == {"success": True}
    assert success_response({"a": 1}, message="ok") == {"success": True, "message": "ok", "data": {"a": 1}}


def test_error_response_includes_code_and_errors():
    body = error_response("Validation failed", code="VALIDATION_ERROR", errors=[{"field": "title", "message": "required"}])

    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["errors"][0]["field"] == "title"


def test_paginated_response_counts_pages():
    body = paginated_response([1, 2], total=21, page=2, limit=10, key="courses")

    assert body["data"]["courses"] == [1, 2]
    assert body["data"]["pagination"] == {"page": 2, "limit": 10, "total": 21, "pages": 3}


def test_to_object_id_rejects_garbage():
    with pytest.raises(BadRequestException) as exc_info:
        to_object_id("123", "course ID")

    assert exc_info.value.message == "Invalid course ID"
    assert exc_info.value.code == "INVALID_ID"


def test_serialize_renames_ids_recursively():
    inner = ObjectId()
    when = datetime(2024, 1, 2, tzinfo=timezone.utc)

    result = serialize({"_id": inner, "lessons": [{"_id": inner}], "createdAt": when})

    assert result == {
        "id": str(inner),
        "lessons": [{"id": str(inner)}],
        "createdAt": when.isoformat(),
    }


def test_conflict_is_reported_as_bad_request():
    assert ConflictException("taken").status_code == 400
