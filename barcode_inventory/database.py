import asyncio
import copy
import uuid
from collections import Counter
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from pymongo import AsyncMongoClient, DESCENDING
from pymongo.errors import DuplicateKeyError, OperationFailure

from .logging import get_logger

# This file holds the document stores and the per-key write locks.

log = get_logger("barcode_inventory.database")

Document = Dict[str, Any]


class DuplicateKey(Exception):
    """Raised by a store when an insert collides with a unique key."""


class LockRegistry:
    """Per-key asyncio locks, dropped again once nobody holds or waits on them."""

    def __init__(self) -> None:
        self._locks: Dict[str, List[Any]] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        entry = self._locks.setdefault(key, [asyncio.Lock(), 0])
        entry[1] += 1
        lock = entry[0]
        try:
            await lock.acquire()
            try:
                yield
            finally:
                lock.release()
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]


class InMemoryStore:
    """Process-local store keyed the same way as the MongoDB collections.

    Dict insertion order doubles as creation order for recency queries.
    """

    def __init__(self) -> None:
        self.products: Dict[str, Document] = {}
        self.categories: Dict[str, Document] = {}

    async def connect(self) -> None:
        log.info("Using in-memory document store")

    async def close(self) -> None:
        pass

    async def find_products(self, category: Optional[str] = None) -> List[Document]:
        out = []
        for p in self.products.values():
            if category and p["category"] != category:
                continue
            out.append(copy.deepcopy(p))
        return out

    async def get_product(self, barcode: str) -> Optional[Document]:
        p = self.products.get(barcode)
        return copy.deepcopy(p) if p is not None else None

    async def insert_product(self, doc: Document) -> Document:
        if doc["barcode"] in self.products:
            raise DuplicateKey(doc["barcode"])
        stored = dict(doc, _id=uuid.uuid4().hex)
        self.products[doc["barcode"]] = stored
        return copy.deepcopy(stored)

    async def set_category(self, barcode: str, category: str) -> bool:
        p = self.products.get(barcode)
        if p is None:
            return False
        p["category"] = category
        return True

    async def list_categories(self) -> List[Document]:
        return [dict(c) for c in self.categories.values()]

    async def get_category(self, name: str) -> Optional[Document]:
        c = self.categories.get(name)
        return dict(c) if c is not None else None

    async def insert_category(self, name: str) -> Document:
        if name in self.categories:
            raise DuplicateKey(name)
        stored = {"_id": uuid.uuid4().hex, "name": name}
        self.categories[name] = stored
        return dict(stored)

    async def category_counts(self) -> List[Document]:
        counts = Counter(p["category"] for p in self.products.values())
        return [{"category": k, "count": v} for k, v in sorted(counts.items())]

    async def recent_products(self, limit: int) -> List[Document]:
        newest_first = list(reversed(list(self.products.values())))
        return [copy.deepcopy(p) for p in newest_first[:limit]]


class MongoStore:
    """MongoDB-backed store; ``connect`` opens the client and ensures indexes."""

    def __init__(self, uri: str, db_name: str = "barcode_inventory") -> None:
        self.uri = uri
        self.db_name = db_name
        self._client: Optional[AsyncMongoClient] = None
        self._db = None

    @property
    def db(self):
        if self._db is None:
            raise RuntimeError("MongoStore used before connect()")
        return self._db

    async def connect(self) -> None:
        self._client = AsyncMongoClient(self.uri)
        self._db = self._client[self.db_name]
        # find-or-create depends on this index; duplicate barcodes stop startup
        await self._db.products.create_index("barcode", unique=True)
        try:
            await self._db.categories.create_index("name", unique=True)
        except OperationFailure as e:
            # existing duplicate names block the index; carry on without it
            log.warning(f"Could not create unique index on categories.name: {e}")
        log.info(f"Connected to MongoDB database '{self.db_name}'")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._db = None

    async def find_products(self, category: Optional[str] = None) -> List[Document]:
        query = {"category": category} if category else {}
        return await self.db.products.find(query).to_list(None)

    async def get_product(self, barcode: str) -> Optional[Document]:
        return await self.db.products.find_one({"barcode": barcode})

    async def insert_product(self, doc: Document) -> Document:
        stored = dict(doc)
        try:
            await self.db.products.insert_one(stored)
        except DuplicateKeyError as e:
            raise DuplicateKey(doc["barcode"]) from e
        return stored

    async def set_category(self, barcode: str, category: str) -> bool:
        result = await self.db.products.update_one(
            {"barcode": barcode}, {"$set": {"category": category}}
        )
        return result.matched_count > 0

    async def list_categories(self) -> List[Document]:
        return await self.db.categories.find({}).to_list(None)

    async def get_category(self, name: str) -> Optional[Document]:
        return await self.db.categories.find_one({"name": name})

    async def insert_category(self, name: str) -> Document:
        stored = {"name": name}
        try:
            await self.db.categories.insert_one(stored)
        except DuplicateKeyError as e:
            raise DuplicateKey(name) from e
        return stored

    async def category_counts(self) -> List[Document]:
        cursor = await self.db.products.aggregate([
            {"$group": {"_id": "$category", "count": {"$sum": 1}}},
            {"$project": {"category": "$_id", "count": 1, "_id": 0}},
            {"$sort": {"category": 1}},
        ])
        return await cursor.to_list(None)

    async def recent_products(self, limit: int) -> List[Document]:
        # ObjectIds grow with insertion time
        cursor = self.db.products.find().sort("_id", DESCENDING).limit(limit)
        return await cursor.to_list(None)


def make_store(mongodb_uri: Optional[str], db_name: str):
    if mongodb_uri:
        return MongoStore(mongodb_uri, db_name)
    return InMemoryStore()
