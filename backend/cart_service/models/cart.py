from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from cart_service.utils.helpers import format_document


class LineItem(BaseModel):
    """One product entry in a cart, stored in the cart_items collection."""
    id: Optional[str] = Field(None, alias="_id")
    cart_id: str
    product_id: str
    quantity: int = Field(gt=0)
    amount: float = Field(ge=0)
    total_amount: float = Field(ge=0)
    image: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "_id": "65a1f0c2e4b0a1b2c3d4e5f7",
                "cart_id": "65a1f0c2e4b0a1b2c3d4e5f6",
                "product_id": "65a1f0c2e4b0a1b2c3d4e5f0",
                "quantity": 2,
                "amount": 10.0,
                "total_amount": 20.0,
                "image": "https://cdn.example.com/a.png"
            }
        }

    @classmethod
    def from_document(cls, document: dict) -> "LineItem":
        return cls.model_validate(format_document(document))


class Cart(BaseModel):
    """Shopping cart model for MongoDB. At most one per user."""
    id: Optional[str] = Field(None, alias="_id")
    user_id: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        populate_by_name = True

    @classmethod
    def from_document(cls, document: dict) -> "Cart":
        return cls.model_validate(format_document(document))


class CartView(Cart):
    """A cart joined with every line item that references it."""
    cart_items: List[LineItem] = Field(default_factory=list)

    @property
    def results(self) -> int:
        return len(self.cart_items)


class AddItemResult(BaseModel):
    cart_item: LineItem
    item_created: bool
    cart_created: bool


class ItemRemoval(BaseModel):
    id: str = Field(alias="_id")
    removed: bool
    
    class Config:
        populate_by_name = True


class RemoveItemsResult(BaseModel):
    outcomes: List[ItemRemoval] = Field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.removed)
