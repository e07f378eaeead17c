#!/usr/bin/env python3
"""
Reconciliation script for enrollment memberships.

Enrollment is stored on both sides (courses.enrolledStudents and
users.enrolledCourses). Without transactions a failed write can leave the
two out of step. This script:
1. Treats a membership recorded on either side as an enrollment
2. Writes it to the side that is missing it
3. Drops references to users or courses that no longer exist
4. Recomputes every user's completedCourses from their progress

Usage:
    python scripts/reconcile_enrollments.py [--dry-run]

Environment variables required:
    MONGODB_URI - MongoDB connection string
    MONGODB_DATABASE - Database name (default: gifttech)
"""

import asyncio
import os
import sys
from collections import defaultdict
from datetime import datetime, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv

from academy.services.progress import calculator

# Load environment variables
load_dotenv()


def plan_reconciliation(courses: list, users: list) -> tuple:
    """
    Work out the corrected membership lists.

    Returns:
        (course_updates, user_updates): dicts of _id -> fields to $set,
        containing only documents that change
    """
    course_ids = {course["_id"] for course in courses}
    user_ids = {user["_id"] for user in users}
    courses_by_id = {course["_id"]: course for course in courses}

    members = defaultdict(set)
    for course in courses:
        for uid in course.get("enrolledStudents") or []:
            if uid in user_ids:
                members[course["_id"]].add(uid)
    for user in users:
        for cid in user.get("enrolledCourses") or []:
            if cid in course_ids:
                members[cid].add(user["_id"])

    enrolled = defaultdict(list)
    course_updates = {}
    for course in courses:
        current = list(course.get("enrolledStudents") or [])
        wanted = [uid for uid in current if uid in members[course["_id"]]]
        wanted += sorted(members[course["_id"]] - set(wanted))
        if wanted != current:
            course_updates[course["_id"]] = {"enrolledStudents": wanted}
        for uid in wanted:
            enrolled[uid].append(course["_id"])

    user_updates = {}
    for user in users:
        current = list(user.get("enrolledCourses") or [])
        wanted = [cid for cid in current if cid in set(enrolled[user["_id"]])]
        wanted += [cid for cid in enrolled[user["_id"]] if cid not in wanted]

        completed = []
        for record in user.get("progress") or []:
            course = courses_by_id.get(record.get("courseId"))
            if course and calculator.is_course_complete(course, record.get("completedLessons") or []):
                completed.append(course["_id"])

        changes = {}
        if wanted != current:
            changes["enrolledCourses"] = wanted
        if completed != list(user.get("completedCourses") or []):
            changes["completedCourses"] = completed
        if changes:
            user_updates[user["_id"]] = changes

    return course_updates, user_updates


async def reconcile(dry_run: bool):
    """Repair enrollment divergence across courses and users."""

    mongodb_uri = os.getenv("MONGODB_URI")
    database_name = os.getenv("MONGODB_DATABASE", "gifttech")

    if not mongodb_uri:
        print("ERROR: MONGODB_URI environment variable not set")
        sys.exit(1)

    print(f"Connecting to database: {database_name}")
    client = AsyncIOMotorClient(mongodb_uri, tz_aware=True)
    db = client[database_name]

    courses_collection = db["courses"]
    users_collection = db["users"]

    print("Fetching courses and users...")
    courses = await courses_collection.find({}, {"enrolledStudents": 1, "lessons._id": 1}).to_list(length=None)
    users = await users_collection.find(
        {},
        {"enrolledCourses": 1, "completedCourses": 1, "progress": 1},
    ).to_list(length=None)
    print(f"Found {len(courses)} courses and {len(users)} users")

    course_updates, user_updates = plan_reconciliation(courses, users)
    print(f"Courses to fix: {len(course_updates)}")
    print(f"Users to fix: {len(user_updates)}")

    if dry_run:
        print("\nDry run: no changes written.")
        client.close()
        return

    now = datetime.now(timezone.utc)
    for course_id, fields in course_updates.items():
        await courses_collection.update_one({"_id": course_id}, {"$set": {**fields, "updatedAt": now}})
    for user_id, fields in user_updates.items():
        await users_collection.update_one({"_id": user_id}, {"$set": {**fields, "updatedAt": now}})

    print("\n" + "=" * 50)
    print("Reconciliation Summary")
    print("=" * 50)
    print(f"Courses updated: {len(course_updates)}")
    print(f"Users updated: {len(user_updates)}")
    print("=" * 50)

    client.close()
    print("\nReconciliation complete!")


if __name__ == "__main__":
    print("Enrollment Reconciliation Script")
    print("-" * 40)
    asyncio.run(reconcile(dry_run="--dry-run" in sys.argv))
