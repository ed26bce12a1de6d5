"""
Database helpers for HyperAttend

Holds the shared pymongo handle and the small helpers the API uses for
inserts and reads. Collections are named after the lowercased schema class
(see schemas.py).
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

import settings
from errors import StorageUnavailable

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
db: Optional[Database] = None

if settings.MONGO_URI:
    _client = MongoClient(settings.MONGO_URI, serverSelectionTimeoutMS=10000)
    db = _client[settings.DATABASE_NAME]


def get_db() -> Database:
    """FastAPI dependency returning the configured database."""
    if db is None:
        raise StorageUnavailable("Database not configured. Please set MONGO_URI.")
    return db


def _resolve(database: Optional[Database]) -> Database:
    return database if database is not None else get_db()


def create_document(collection_name: str, data: Union[BaseModel, dict], database: Optional[Database] = None):
    """Insert a document and return the stored copy (with ``_id``)."""
    target = _resolve(database)
    if isinstance(data, BaseModel):
        doc = data.model_dump()
    else:
        doc = dict(data)
    now = datetime.now(timezone.utc)
    doc.setdefault("created_at", now)
    doc["updated_at"] = now
    result = target[collection_name].insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None,
                  database: Optional[Database] = None):
    """Fetch documents in insertion order."""
    target = _resolve(database)
    cursor = target[collection_name].find(filter_dict or {}).sort("_id", ASCENDING)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def ensure_indexes(database: Optional[Database] = None) -> None:
    target = database if database is not None else db
    if target is None:
        return
    try:
        target["student"].create_index("id", unique=True)
        target["notification"].create_index([("studentId", ASCENDING), ("date", ASCENDING)])
    except PyMongoError as e:
        # Startup must survive an unreachable server; requests will report it.
        logger.warning("Could not create indexes: %s", e)
