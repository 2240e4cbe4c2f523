from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user
from app.db.session import get_session
from app.models.user import User
from app.schemas.cart import (
    CartEntryRead,
    CartItemCreate,
    CartItemRemove,
    CartMessage,
    CartMutationResponse,
    CartQuantityUpdate,
)
from app.services import cart as cart_service

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=list[CartEntryRead])
async def list_cart(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await cart_service.list_items(session, current_user)


@router.post("", response_model=CartMutationResponse)
async def add_to_cart(
    payload: CartItemCreate | None = None,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    lines = await cart_service.add_item(session, current_user, (payload or CartItemCreate()).product_id)
    return CartMutationResponse(message="Product added to cart", cart_items=cart_service.serialize_lines(lines))


@router.delete("/clear", response_model=CartMessage)
async def clear_cart(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    await cart_service.clear_cart(session, current_user)
    return CartMessage(message="Cart cleared successfully")


@router.delete("", response_model=CartMutationResponse)
async def remove_from_cart(
    payload: CartItemRemove | None = None,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    lines = await cart_service.remove_product(session, current_user, (payload or CartItemRemove()).product_id)
    return CartMutationResponse(message="Product removed from cart", cart_items=cart_service.serialize_lines(lines))


@router.put("/{product_id}", response_model=CartMutationResponse)
async def update_quantity(
    product_id: str,
    payload: CartQuantityUpdate | None = None,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    quantity = (payload or CartQuantityUpdate()).quantity
    lines = await cart_service.update_quantity(session, current_user, product_id, quantity)
    return CartMutationResponse(message="Cart updated", cart_items=cart_service.serialize_lines(lines))
