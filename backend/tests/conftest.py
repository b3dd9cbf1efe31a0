"""
Shared fixtures for cart service tests.

InMemoryStore is a StoreAdapter test double. It enforces the same unique
keys as the MongoDB indexes and yields to the event loop at the start of
every call, so concurrent operations interleave the way they do against a
real database.
"""
import asyncio
import copy

import pytest
from bson import ObjectId

from cart_service.core.exceptions import ConstraintViolation
from cart_service.services.cart_service import CartEngine
from cart_service.services.store import CARTS, CART_ITEMS, StoreAdapter


class InMemoryStore(StoreAdapter):
    unique_keys = {
        CARTS: ("user_id",),
        CART_ITEMS: ("cart_id", "product_id"),
    }

    def __init__(self):
        self.collections = {CARTS: [], CART_ITEMS: []}
        self.deletes = []

    @staticmethod
    def _matches(document, filter):
        return all(document.get(key) == value for key, value in filter.items())

    def _find(self, collection, filter):
        for document in self.collections.setdefault(collection, []):
            if self._matches(document, filter):
                return document
        return None

    async def find_one(self, collection, filter, timeout=None):
        await asyncio.sleep(0)
        return copy.deepcopy(self._find(collection, filter))

    async def create(self, collection, fields, timeout=None):
        await asyncio.sleep(0)
        keys = self.unique_keys.get(collection)
        if keys and self._find(collection, {key: fields.get(key) for key in keys}):
            raise ConstraintViolation()
        document = dict(fields, _id=ObjectId())
        self.collections.setdefault(collection, []).append(document)
        return copy.deepcopy(document)

    async def update(self, collection, record, timeout=None):
        await asyncio.sleep(0)
        document = self._find(collection, {"_id": record["_id"]})
        if document is not None:
            document.update(record)
        return record

    async def increment(self, collection, filter, amounts, fields=None, timeout=None):
        await asyncio.sleep(0)
        document = self._find(collection, filter)
        if document is None:
            return None
        for key, value in amounts.items():
            document[key] = document.get(key, 0) + value
        document.update(fields or {})
        return copy.deepcopy(document)

    async def delete_one(self, collection, filter, timeout=None):
        await asyncio.sleep(0)
        self.deletes.append(filter)
        document = self._find(collection, filter)
        if document is None:
            return False
        self.collections[collection].remove(document)
        return True

    async def join_query(self, collection, filter, join, timeout=None):
        await asyncio.sleep(0)
        document = self._find(collection, filter)
        if document is None:
            return None
        joined = copy.deepcopy(document)
        joined[join.as_field] = [
            copy.deepcopy(other)
            for other in self.collections.get(join.from_collection, [])
            if other.get(join.foreign_field) == document.get(join.local_field)
        ]
        return joined


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def engine(store):
    return CartEngine(store, timeout=5.0)
