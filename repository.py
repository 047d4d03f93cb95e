"""
Name-keyed CRUD over a single collection (customers, products).

Name uniqueness is enforced by the unique index created in
database.ensure_indexes, so create is a plain insert that maps the
duplicate-key error to Conflict.
"""
import logging
from typing import Any, Dict, List, Union

from pydantic import BaseModel
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document, get_documents
from errors import Conflict, NotFound

logger = logging.getLogger(__name__)


class EntityRepository:
    def __init__(self, db: Database, collection_name: str, label: str):
        self.db = db
        self.collection_name = collection_name
        self.label = label

    @property
    def collection(self):
        return self.db[self.collection_name]

    def create(self, entity: Union[BaseModel, Dict[str, Any]]) -> str:
        try:
            new_id = create_document(self.db, self.collection_name, entity)
        except DuplicateKeyError:
            raise Conflict(f"{self.label} with this name already exists")
        logger.info("Created %s %s", self.label.lower(), new_id)
        return new_id

    def list_all(self) -> List[dict]:
        return get_documents(self.db, self.collection_name)

    def get_by_name(self, name: str) -> dict:
        doc = self.collection.find_one({"name": name})
        if not doc:
            raise NotFound(f"{self.label} not found")
        return doc

    def update_by_name(self, name: str, fields: Dict[str, Any]) -> None:
        """Shallow merge: only the given top-level fields are overwritten."""
        if not fields:
            # $set with an empty document is rejected by the server
            self.get_by_name(name)
            return
        try:
            result = self.collection.update_one({"name": name}, {"$set": fields})
        except DuplicateKeyError:
            raise Conflict(f"{self.label} with this name already exists")
        if result.matched_count == 0:
            raise NotFound(f"{self.label} not found")

    def delete_by_name(self, name: str) -> None:
        result = self.collection.delete_one({"name": name})
        if result.deleted_count == 0:
            raise NotFound(f"{self.label} not found")
        logger.info("Deleted %s %s", self.label.lower(), name)


def customers(db: Database) -> EntityRepository:
    return EntityRepository(db, "customers", "Customer")


def products(db: Database) -> EntityRepository:
    return EntityRepository(db, "products", "Product")
