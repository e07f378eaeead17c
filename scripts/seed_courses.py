#!/usr/bin/env python3
"""
Seed script that replaces the course catalog with the starter courses.

This script:
1. Loads course definitions from scripts/data/courses.json
2. Validates each one against the course creation schema
3. Deletes every existing course
4. Creates the starter courses (slugs and lesson ids are generated)

Usage:
    python scripts/seed_courses.py [path/to/courses.json]

Environment variables required:
    MONGODB_URI - MongoDB connection string
    MONGODB_DATABASE - Database name (default: gifttech)
"""

import asyncio
import json
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv

from academy.schemas.course import CreateCourseRequest
from academy.services.course import CourseService

# Load environment variables
load_dotenv()

DEFAULT_SEED_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "courses.json")


def load_courses(path: str) -> list:
    """Read and validate the seed file."""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    return [CreateCourseRequest(**item).model_dump() for item in raw]


async def seed_courses(path: str):
    """Replace all courses with the ones in the seed file."""

    mongodb_uri = os.getenv("MONGODB_URI")
    database_name = os.getenv("MONGODB_DATABASE", "gifttech")

    if not mongodb_uri:
        print("ERROR: MONGODB_URI environment variable not set")
        sys.exit(1)

    courses = load_courses(path)
    print(f"Loaded {len(courses)} courses from {path}")

    print(f"Connecting to database: {database_name}")
    client = AsyncIOMotorClient(mongodb_uri, tz_aware=True)
    db = client[database_name]

    try:
        result = await db["courses"].delete_many({})
        print(f"Existing courses cleared ({result.deleted_count} removed)")

        course_service = CourseService(db=db)
        for data in courses:
            course = await course_service.create_course(data)
            print(f"  + {course['slug']} ({len(course['lessons'])} lessons)")

        print(f"\nSeeded {len(courses)} courses successfully")
    finally:
        client.close()
        print("Database connection closed")


if __name__ == "__main__":
    print("Course Seed Script")
    print("-" * 40)
    asyncio.run(seed_courses(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_SEED_FILE))
