"""
Database helpers

Thin layer over pymongo shared by the API and the maintenance scripts.
Documents are written through `create_document`, which stamps
created_at/updated_at, and read back through `get_documents`.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union
from urllib.parse import urlsplit

from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient

from config import Config

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC, the form pymongo hands datetimes back in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _safe_target(url: str) -> str:
    # host part only, credentials stay out of the logs
    parts = urlsplit(url)
    return parts.hostname or url


def connect(url: Optional[str] = None, name: Optional[str] = None):
    """Open a client and return (client, database)."""
    url = url or Config.DATABASE_URL
    name = name or Config.DATABASE_NAME
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    client = MongoClient(url)
    logger.info(f"Connecting to MongoDB at {_safe_target(url)}, database {name}")
    return client, client[name]


client = None
db = None
if Config.DATABASE_URL:
    client, db = connect()


def ensure_indexes(database=None):
    database = database if database is not None else db
    if database is None:
        return
    # only real IDs are unique; missing, null or "" IDs wait for migrate_employee_ids
    database["employee"].create_index(
        [("employeeID", ASCENDING)],
        unique=True,
        partialFilterExpression={"employeeID": {"$type": "string", "$gt": ""}},
    )
    database["user"].create_index([("username", ASCENDING)], unique=True)
    database["user"].create_index([("email", ASCENDING)], unique=True)
    database["shoppingbill"].create_index([("billNumber", ASCENDING)], unique=True)
    database["session"].create_index([("token", ASCENDING)], unique=True)
    database["monthlysummary"].create_index([("month", ASCENDING)], unique=True)


def create_document(collection_name: str, data: Union[BaseModel, dict], database=None) -> str:
    database = database if database is not None else db
    if database is None:
        raise RuntimeError("Database not available")
    doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    now = utcnow()
    doc.setdefault("created_at", now)
    doc["updated_at"] = now
    result = database[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None, database=None):
    database = database if database is not None else db
    if database is None:
        raise RuntimeError("Database not available")
    cursor = database[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
