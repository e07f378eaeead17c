"""
Timestamp helpers shared by all collections.

Every document carries createdAt and updatedAt. Services build plain dicts
for Motor, so these helpers stamp new documents and inject updatedAt into
update specifications.

Example:
    from common.database import with_timestamps, touch

    doc = with_timestamps({"email": "ada@example.com"})
    await users.insert_one(doc)

    await users.update_one({"_id": user_id}, touch({"$set": {"name": "Ada"}}))
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utcnow() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


def with_timestamps(doc: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Return a copy of a new document with createdAt/updatedAt set."""
    now = now or utcnow()
    return {**doc, "createdAt": now, "updatedAt": now}


def touch(update: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Add updatedAt to an update specification.

    Works for operator updates ($set, $addToSet, $pull ...). The input
    is not modified.
    """
    now = now or utcnow()
    result = dict(update)
    result["$set"] = {**result.get("$set", {}), "updatedAt": now}
    return result
