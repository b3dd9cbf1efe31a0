"""
Document store adapter used by the cart engine.

The adapter is deliberately thin: point lookups, single-document writes, an
atomic increment and a one-level join. Uniqueness rules live in the store
itself (unique indexes), and a duplicate key surfaces as ConstraintViolation
so the engine can re-read and merge.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, ExecutionTimeout, NetworkTimeout, PyMongoError

from cart_service.core.exceptions import ConstraintViolation, PersistenceError, PersistenceTimeout

logger = logging.getLogger(__name__)

CARTS = "carts"
CART_ITEMS = "cart_items"


@dataclass(frozen=True)
class JoinSpec:
    """One-level join, shaped like a MongoDB $lookup stage."""
    from_collection: str
    local_field: str
    foreign_field: str
    as_field: str

    def to_lookup(self) -> dict:
        return {
            "$lookup": {
                "from": self.from_collection,
                "localField": self.local_field,
                "foreignField": self.foreign_field,
                "as": self.as_field,
            }
        }


class StoreAdapter(ABC):
    """Interface the cart engine consumes. All calls accept an optional timeout in seconds."""

    @abstractmethod
    async def find_one(self, collection: str, filter: dict, timeout: Optional[float] = None) -> Optional[dict]:
        ...

    @abstractmethod
    async def create(self, collection: str, fields: dict, timeout: Optional[float] = None) -> dict:
        """Insert a new document. Raises ConstraintViolation on a duplicate key."""

    @abstractmethod
    async def update(self, collection: str, record: dict, timeout: Optional[float] = None) -> dict:
        """Persist the fields of an existing record, matched by its _id."""

    @abstractmethod
    async def increment(
        self,
        collection: str,
        filter: dict,
        amounts: Dict[str, Any],
        fields: Optional[dict] = None,
        timeout: Optional[float] = None
    ) -> Optional[dict]:
        """Atomically add `amounts` to numeric fields. Returns the updated document or None."""

    @abstractmethod
    async def delete_one(self, collection: str, filter: dict, timeout: Optional[float] = None) -> bool:
        ...

    @abstractmethod
    async def join_query(
        self,
        collection: str,
        filter: dict,
        join: JoinSpec,
        timeout: Optional[float] = None
    ) -> Optional[dict]:
        """Return the first document matching `filter` with the joined records attached."""


class MongoStore(StoreAdapter):
    """StoreAdapter backed by a Motor database."""

    def __init__(self, db: AsyncIOMotorDatabase, timeout: Optional[float] = None):
        self.db = db
        self.timeout = timeout

    async def _run(self, awaitable, timeout: Optional[float], action: str):
        """Await a driver call under a deadline and translate driver errors."""
        if timeout is None:
            timeout = self.timeout
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"Store {action} timed out after {timeout}s")
            raise PersistenceTimeout()
        except DuplicateKeyError as e:
            raise ConstraintViolation() from e
        except (ExecutionTimeout, NetworkTimeout) as e:
            logger.error(f"Store {action} timed out: {e}")
            raise PersistenceTimeout() from e
        except PyMongoError as e:
            logger.error(f"Store {action} failed: {e}")
            raise PersistenceError() from e

    async def ensure_indexes(self):
        """Create the unique indexes that back the one-cart-per-user and one-item-per-product rules."""
        await self._run(
            self.db[CARTS].create_index([("user_id", ASCENDING)], unique=True),
            None,
            "create_index"
        )
        await self._run(
            self.db[CART_ITEMS].create_index(
                [("cart_id", ASCENDING), ("product_id", ASCENDING)],
                unique=True
            ),
            None,
            "create_index"
        )
        logger.info("Cart indexes ensured")

    async def find_one(self, collection, filter, timeout=None):
        return await self._run(self.db[collection].find_one(filter), timeout, "find_one")

    async def create(self, collection, fields, timeout=None):
        document = dict(fields)
        result = await self._run(self.db[collection].insert_one(document), timeout, "insert")
        document["_id"] = result.inserted_id
        return document

    async def update(self, collection, record, timeout=None):
        changes = {k: v for k, v in record.items() if k != "_id"}
        await self._run(
            self.db[collection].update_one({"_id": record["_id"]}, {"$set": changes}),
            timeout,
            "update"
        )
        return record

    async def increment(self, collection, filter, amounts, fields=None, timeout=None):
        update = {"$inc": amounts}
        if fields:
            update["$set"] = fields
        return await self._run(
            self.db[collection].find_one_and_update(
                filter,
                update,
                return_document=ReturnDocument.AFTER
            ),
            timeout,
            "increment"
        )

    async def delete_one(self, collection, filter, timeout=None):
        result = await self._run(self.db[collection].delete_one(filter), timeout, "delete")
        return result.deleted_count == 1

    async def join_query(self, collection, filter, join, timeout=None):
        pipeline = [{"$match": filter}, {"$limit": 1}, join.to_lookup()]
        cursor = self.db[collection].aggregate(pipeline)
        documents = await self._run(cursor.to_list(length=1), timeout, "join")
        return documents[0] if documents else None
