"""
Database module - Generic async MongoDB connection using Motor.

Provides reusable MongoDB connectivity for any project.

Usage:
    from common.database import MongoDB, set_main_database, get_main_database

    # Set up singleton
    db = MongoDB()
    await db.connect(uri, database_name, indexes)
    set_main_database(db)

    # Access anywhere
    main_db = get_main_database()
    collection = main_db.get_collection("users")
"""

from common.database.mongodb import (
    MongoDB,
    mask_uri,
    # Singleton management
    set_main_database,
    get_main_database,
)
from common.database.base_document import utcnow, with_timestamps, touch
from common.database.transactions import transaction_scope

__all__ = [
    "MongoDB",
    "mask_uri",
    # Singleton management
    "set_main_database",
    "get_main_database",
    # Document helpers
    "utcnow",
    "with_timestamps",
    "touch",
    "transaction_scope",
]
