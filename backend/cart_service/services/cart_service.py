import asyncio
import logging
import math
from typing import List, Optional

from cart_service.core.config import settings
from cart_service.core.exceptions import (
    ConstraintViolation,
    EmptyCartError,
    PersistenceTimeout,
    ValidationError
)
from cart_service.models.cart import (
    AddItemResult,
    CartView,
    ItemRemoval,
    LineItem,
    RemoveItemsResult
)
from cart_service.services.store import CARTS, CART_ITEMS, JoinSpec, StoreAdapter
from cart_service.utils.helpers import get_current_timestamp, parse_object_id
from cart_service.utils.retry import merge_retry

logger = logging.getLogger(__name__)

CART_ITEMS_JOIN = JoinSpec(
    from_collection=CART_ITEMS,
    local_field="_id",
    foreign_field="cart_id",
    as_field="cart_items"
)


class OperationDeadline:
    """Time budget shared by every store call of one cart operation."""

    def __init__(self, seconds: Optional[float]):
        self.expires_at = None
        if seconds is not None:
            self.expires_at = asyncio.get_running_loop().time() + seconds

    def seconds_left(self) -> Optional[float]:
        """Time left in the budget, None when unlimited. Never raises."""
        if self.expires_at is None:
            return None
        return self.expires_at - asyncio.get_running_loop().time()

    def remaining(self) -> Optional[float]:
        left = self.seconds_left()
        if left is not None and left <= 0:
            raise PersistenceTimeout()
        return left


def _require_id(value, field: str):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")


def _require_quantity(value):
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError("quantity must be a positive integer")


def _require_amount(value, field: str):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number")
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"{field} must not be negative")


class CartEngine:
    """
    Cart consistency and merge engine.

    Adding a product finds or creates the user's cart, then either creates a
    line item or merges into the existing one. Uniqueness is enforced by the
    store; losing a creation race is treated as "re-read and merge".
    """

    def __init__(self, store: StoreAdapter, timeout: Optional[float] = None):
        self.store = store
        self.timeout = settings.STORE_TIMEOUT_SECONDS if timeout is None else timeout

    def _deadline(self, timeout: Optional[float]) -> OperationDeadline:
        return OperationDeadline(self.timeout if timeout is None else timeout)

    async def add_item(
        self,
        user_id: str,
        email: Optional[str],
        product_id: str,
        quantity: int,
        amount: float,
        total_amount: float,
        image: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> AddItemResult:
        """
        Add a product to the user's cart.

        The supplied total_amount is trusted as-is, it is not recomputed from
        quantity and amount. When the product is already in the cart, quantity
        and total_amount are accumulated while amount and image keep their
        first values.

        The line item write is the last write of the operation. Once it is
        stored the call reports success, so a client retry after an error
        never adds the quantity twice.

        Raises:
            ValidationError: missing ids or invalid numbers
            PersistenceError: store failure or timeout. A cart created before
                the failure is kept and reused by the next call.
        """
        _require_id(user_id, "user_id")
        _require_id(product_id, "product_id")
        _require_quantity(quantity)
        _require_amount(amount, "amount")
        _require_amount(total_amount, "total_amount")

        deadline = self._deadline(timeout)
        cart, cart_created = await self._find_or_create_cart(user_id, email, deadline)

        save_item = merge_retry(deadline)(self._save_item)
        item, item_created = await save_item(
            cart, product_id, quantity, amount, total_amount, image or "", deadline
        )

        return AddItemResult(
            cart_item=LineItem.from_document(item),
            item_created=item_created,
            cart_created=cart_created
        )

    async def _save_item(
        self,
        cart: dict,
        product_id: str,
        quantity: int,
        amount: float,
        total_amount: float,
        image: str,
        deadline: OperationDeadline
    ):
        """Create the line item, or merge into it. Returns (document, created)."""
        item_filter = {"cart_id": cart["_id"], "product_id": product_id}
        item = await self.store.find_one(CART_ITEMS, item_filter, timeout=deadline.remaining())
        now = get_current_timestamp()

        if item is None:
            try:
                item = await self.store.create(
                    CART_ITEMS,
                    {
                        "cart_id": cart["_id"],
                        "product_id": product_id,
                        "quantity": quantity,
                        "amount": amount,
                        "total_amount": total_amount,
                        "image": image,
                        "created_at": now,
                        "updated_at": now
                    },
                    timeout=deadline.remaining()
                )
                logger.info(f"Added product {product_id} to cart {cart['_id']}")
                return item, True
            except ConstraintViolation:
                logger.warning(
                    f"Product {product_id} was added to cart {cart['_id']} concurrently, merging"
                )

        item = await self.store.increment(
            CART_ITEMS,
            item_filter,
            {"quantity": quantity, "total_amount": total_amount},
            {"updated_at": now},
            timeout=deadline.remaining()
        )
        if item is None:
            # Removed between lookup and merge
            raise ConstraintViolation()
        return item, False

    async def _find_or_create_cart(self, user_id: str, email: Optional[str], deadline: OperationDeadline):
        """Resolve the user's cart, touching updated_at. Returns (document, created)."""
        now = get_current_timestamp()
        cart = await self.store.find_one(CARTS, {"user_id": user_id}, timeout=deadline.remaining())
        if cart is None:
            try:
                cart = await self.store.create(
                    CARTS,
                    {"user_id": user_id, "email": email, "created_at": now, "updated_at": now},
                    timeout=deadline.remaining()
                )
                logger.info(f"Created cart {cart['_id']} for user {user_id}")
                return cart, True
            except ConstraintViolation:
                logger.warning(f"Cart for user {user_id} was created concurrently, re-reading")

            # Carts are never deleted here, so the winner's cart is still there
            cart = await self.store.find_one(CARTS, {"user_id": user_id}, timeout=deadline.remaining())
            if cart is None:
                raise ConstraintViolation()

        cart["updated_at"] = now
        await self.store.update(
            CARTS,
            {"_id": cart["_id"], "updated_at": now},
            timeout=deadline.remaining()
        )
        return cart, False


    async def get_cart(self, user_id: str, timeout: Optional[float] = None) -> Optional[CartView]:
        """Get the user's cart joined with its line items, or None when the user has no cart."""
        _require_id(user_id, "user_id")
        deadline = self._deadline(timeout)

        document = await self.store.join_query(
            CARTS,
            {"user_id": user_id},
            CART_ITEMS_JOIN,
            timeout=deadline.remaining()
        )
        if document is None:
            return None
        return CartView.from_document(document)

    async def remove_items(
        self,
        user_id: str,
        item_ids: List[str],
        timeout: Optional[float] = None
    ) -> RemoveItemsResult:
        """
        Remove line items from the user's cart.

        Deletion is always scoped to the user's own cart, so ids belonging to
        another cart are reported as not removed. Missing or malformed ids do
        not stop the rest of the batch.

        Raises:
            EmptyCartError: the user has no cart, or the cart has no items
        """
        _require_id(user_id, "user_id")
        if not isinstance(item_ids, list):
            raise ValidationError("cart_items must be a list")
        deadline = self._deadline(timeout)

        cart = await self.store.find_one(CARTS, {"user_id": user_id}, timeout=deadline.remaining())
        if cart is None:
            raise EmptyCartError()

        any_item = await self.store.find_one(
            CART_ITEMS, {"cart_id": cart["_id"]}, timeout=deadline.remaining()
        )
        if any_item is None:
            raise EmptyCartError()

        outcomes = []
        for raw_id in item_ids:
            object_id = parse_object_id(raw_id)
            removed = False
            if object_id is not None:
                removed = await self.store.delete_one(
                    CART_ITEMS,
                    {"_id": object_id, "cart_id": cart["_id"]},
                    timeout=deadline.remaining()
                )
            if not removed:
                logger.info(f"Item {raw_id} not found in cart {cart['_id']}, skipped")
            outcomes.append(ItemRemoval(id=str(raw_id), removed=removed))

        result = RemoveItemsResult(outcomes=outcomes)
        logger.info(f"Removed {result.removed_count} of {len(item_ids)} items from cart {cart['_id']}")
        return result
