from fastapi import APIRouter, Depends, Query

from cart_service.api.deps import get_cart_engine
from cart_service.core.exceptions import NotFoundError
from cart_service.schemas.cart import (
    AddToCartRequest,
    AddToCartResponse,
    GetCartResponse,
    RemoveFromCartRequest,
    RemoveFromCartResponse
)
from cart_service.services.cart_service import CartEngine

router = APIRouter()


@router.post("", response_model=AddToCartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    engine: CartEngine = Depends(get_cart_engine)
):
    """
    Add a product to the user's cart.
    
    Creates the cart on the user's first addition. If the product is already
    in the cart, quantity and total_amount are accumulated.
    """
    item = request.cart_items
    result = await engine.add_item(
        user_id=request.user_id,
        email=request.email,
        product_id=item.product_id,
        quantity=item.quantity,
        amount=item.amount,
        total_amount=item.total_amount,
        image=item.image
    )
    
    return {
        "status": "success",
        "message": "Product successfully added to cart",
        "data": {"cart_item": result.cart_item.model_dump(by_alias=True)}
    }


@router.get("", response_model=GetCartResponse)
async def get_cart(
    user_id: str = Query(..., min_length=1),
    engine: CartEngine = Depends(get_cart_engine)
):
    """
    Get the user's cart with all of its items.
    
    Never creates a cart; responds 404 when the user has none.
    """
    cart = await engine.get_cart(user_id)
    if cart is None:
        raise NotFoundError()
    
    return {
        "status": "success",
        "results": cart.results,
        "data": {"user_cart": cart.model_dump(by_alias=True)}
    }


@router.delete("", response_model=RemoveFromCartResponse)
async def remove_from_cart(
    request: RemoveFromCartRequest,
    engine: CartEngine = Depends(get_cart_engine)
):
    """
    Remove items from the user's cart.
    
    Only items belonging to the user's own cart are removed. Each id is
    reported with whether it was removed.
    """
    result = await engine.remove_items(
        user_id=request.user_id,
        item_ids=[ref.id for ref in request.cart_items]
    )
    
    return {
        "status": "success",
        "message": "Removed from cart successfully",
        "results": result.removed_count,
        "data": {"cart_items": [outcome.model_dump(by_alias=True) for outcome in result.outcomes]}
    }
