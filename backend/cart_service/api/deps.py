from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from cart_service.core.config import settings
from cart_service.core.database import get_database
from cart_service.services.cart_service import CartEngine
from cart_service.services.store import MongoStore, StoreAdapter


async def get_db() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    return get_database()


async def get_store(db: AsyncIOMotorDatabase = Depends(get_db)) -> StoreAdapter:
    """Dependency to get the document store adapter."""
    return MongoStore(db, timeout=settings.STORE_TIMEOUT_SECONDS)


async def get_cart_engine(store: StoreAdapter = Depends(get_store)) -> CartEngine:
    """Dependency to get the cart engine. The engine holds no state between requests."""
    return CartEngine(store)
