from typing import List, Optional
from pydantic import BaseModel, Field


class CartItemPayload(BaseModel):
    """Product being added to a cart."""
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    amount: float = Field(ge=0)
    total_amount: float = Field(ge=0)
    image: Optional[str] = None


class AddToCartRequest(BaseModel):
    """Schema for adding a product to cart."""
    user_id: str = Field(min_length=1)
    email: Optional[str] = None
    cart_items: CartItemPayload
    
    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "65a1f0c2e4b0a1b2c3d4e5f1",
                "email": "buyer@example.com",
                "cart_items": {
                    "product_id": "65a1f0c2e4b0a1b2c3d4e5f0",
                    "quantity": 2,
                    "amount": 10.0,
                    "total_amount": 20.0,
                    "image": "https://cdn.example.com/a.png"
                }
            }
        }


class ItemRef(BaseModel):
    id: str = Field(alias="_id")


class RemoveFromCartRequest(BaseModel):
    """Schema for removing items from a cart."""
    user_id: str = Field(min_length=1)
    cart_items: List[ItemRef]
    
    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "65a1f0c2e4b0a1b2c3d4e5f1",
                "cart_items": [{"_id": "65a1f0c2e4b0a1b2c3d4e5f7"}]
            }
        }


class CartItemResponse(BaseModel):
    """Line item as returned to clients."""
    id: str = Field(alias="_id")
    cart_id: str
    product_id: str
    quantity: int
    amount: float
    total_amount: float
    image: str = ""
    
    class Config:
        from_attributes = True
        populate_by_name = True


class UserCartResponse(BaseModel):
    """Cart joined with its items."""
    id: str = Field(alias="_id")
    user_id: str
    email: Optional[str] = None
    cart_items: List[CartItemResponse]
    
    class Config:
        from_attributes = True
        populate_by_name = True


class AddToCartData(BaseModel):
    cart_item: CartItemResponse


class AddToCartResponse(BaseModel):
    status: str = "success"
    message: str
    data: AddToCartData


class GetCartData(BaseModel):
    user_cart: UserCartResponse


class GetCartResponse(BaseModel):
    status: str = "success"
    results: int
    data: GetCartData


class ItemRemovalResponse(BaseModel):
    id: str = Field(alias="_id")
    removed: bool
    
    class Config:
        from_attributes = True
        populate_by_name = True


class RemoveFromCartData(BaseModel):
    cart_items: List[ItemRemovalResponse]


class RemoveFromCartResponse(BaseModel):
    status: str = "success"
    message: str
    results: int
    data: RemoveFromCartData


class ErrorResponse(BaseModel):
    status: str
    message: str
