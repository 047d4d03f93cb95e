"""
Document store access

One MongoClient is opened at startup and its Database handle is kept on
``app.state.db``; routes receive it through the ``get_db`` dependency.
"""
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from fastapi import Request
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient, TEXT, GEOSPHERE
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "E_commerce")

# (collection, keys, options)
INDEXES = [
    ("products", [("name", TEXT), ("description", TEXT)], {}),
    ("customers", [("date", ASCENDING)], {}),
    ("orders", [("date", ASCENDING)], {}),
    ("customers", [("location", GEOSPHERE)], {}),
    ("auth", [("username", ASCENDING)], {"unique": True}),
    ("customers", [("name", ASCENDING)], {"unique": True}),
    ("products", [("name", ASCENDING)], {"unique": True}),
]


def connect(url: str = DATABASE_URL, name: str = DATABASE_NAME, timeout_ms: int = 5000) -> Database:
    """Open the store and ping it. Exits the process if the store is unreachable."""
    try:
        client = MongoClient(url, serverSelectionTimeoutMS=timeout_ms, tz_aware=True, tzinfo=timezone.utc)
        client.admin.command("ping")
    except PyMongoError as e:
        logger.critical("Error connecting to MongoDB at %s: %s", url, e)
        sys.exit(1)
    logger.info("Connected to MongoDB database %s", name)
    return client[name]


def ensure_indexes(db: Database) -> None:
    for collection, keys, options in INDEXES:
        db[collection].create_index(keys, **options)
    logger.info("Indexes ensured on %d collections", len({c for c, _, _ in INDEXES}))


def get_db(request: Request) -> Database:
    return request.app.state.db


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    if isinstance(data, BaseModel):
        # only what the caller supplied, nested models in full
        data = data.model_dump(include=data.model_fields_set)
    else:
        data = dict(data)
    result = db[collection_name].insert_one(data)
    return str(result.inserted_id)


def get_documents(db: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None, limit: int = 0) -> List[dict]:
    return list(db[collection_name].find(filter_dict or {}, limit=limit))


def utc_isoformat(value: datetime) -> str:
    """ISO 8601 in UTC with a trailing Z. Naive values are taken as UTC, as the store does."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def to_public(doc: dict) -> dict:
    """Swap the ObjectId ``_id`` for a string ``id`` and render dates as UTC ISO strings."""
    out = {k: utc_isoformat(v) if isinstance(v, datetime) else v for k, v in doc.items()}
    if "_id" in out:
        out["id"] = str(out.pop("_id"))
    return out
