from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CartLineRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product: UUID
    quantity: int


# Identifier and quantity are checked by the cart service so that malformed
# values are reported as invalid input rather than as body validation errors.
# The product id is read from either "productId" or "product_id".
class CartItemCreate(BaseModel):
    product_id: Any = Field(default=None, validation_alias=AliasChoices("productId", "product_id"))


class CartItemRemove(BaseModel):
    product_id: Any = Field(default=None, validation_alias=AliasChoices("productId", "product_id"))


class CartQuantityUpdate(BaseModel):
    quantity: Any = None


class CartEntryRead(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    price: Decimal
    image: str | None = None
    category: str | None = None
    is_featured: bool = False
    quantity: int


class CartMessage(BaseModel):
    message: str


class CartMutationResponse(CartMessage):
    cart_items: list[CartLineRead] = []
