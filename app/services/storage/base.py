"""
Base Repository - Motor collection access shared by the store repositories
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging
import uuid

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.utils.error_handlers import DatabaseError

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def serialize(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Expose Mongo's _id as a string id"""
    if document is None:
        return None
    document = dict(document)
    if "_id" in document:
        document["id"] = str(document.pop("_id"))
    return document


class BaseRepository:
    """
    Wraps one collection; driver failures surface as DatabaseError
    """

    collection_name: str = ""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[self.collection_name]

    @contextmanager
    def _errors(self, action: str):
        try:
            yield
        except PyMongoError as e:
            logger.error(f"Database error while trying to {action} in {self.collection_name}: {str(e)}")
            raise DatabaseError(f"Failed to {action}") from e
