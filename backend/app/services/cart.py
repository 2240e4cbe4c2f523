from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import Conflict, InternalError, InvalidInput, NotFound
from app.core.operation_log import logged_operation
from app.models.catalog import Product
from app.models.user import User
from app.schemas.cart import CartEntryRead, CartLineRead
from app.services import catalog as catalog_service
from app.services.cart_lines import CartLine, CartLineSet, parse_product_id


def _require_product_id(value: Any) -> UUID:
    product_id = parse_product_id(value)
    if product_id is None:
        raise InvalidInput("Valid product ID required")
    return product_id


def _require_quantity(value: Any) -> int:
    # Integral floats such as 2.0 count as integers.
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInput("Quantity must be a non-negative integer")
    return value


def load_cart(user: User) -> CartLineSet:
    return CartLineSet.from_storage(user.cart_items, owner=user.id)


async def _save_cart(session: AsyncSession, user: User, lines: CartLineSet) -> None:
    user.cart_items = lines.to_storage()
    session.add(user)
    try:
        await session.commit()
    except StaleDataError:
        await session.rollback()
        raise Conflict("Cart was modified concurrently, retry")


def serialize_lines(lines: CartLineSet) -> list[CartLineRead]:
    return [CartLineRead.model_validate(line) for line in lines]


def _enrich(product: Product, line: CartLine) -> CartEntryRead:
    return CartEntryRead(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        image=product.image,
        category=product.category,
        is_featured=product.is_featured,
        quantity=line.quantity,
    )


@logged_operation("cart.list")
async def list_items(session: AsyncSession, user: User) -> list[CartEntryRead]:
    """Join the cart with the catalog.

    Lines whose product is gone from the catalog are left out of the result but kept
    in storage. Entries come back in the order the catalog returns the products.
    """
    lines = load_cart(user)
    if not lines:
        return []

    products = await catalog_service.get_products_by_ids(session, lines.product_ids())
    entries: list[CartEntryRead] = []
    for product in products:
        line = lines.get(product.id)
        if line is None:
            raise InternalError(f"Catalog returned product {product.id} which is not in the cart")
        entries.append(_enrich(product, line))
    return entries


@logged_operation("cart.add")
async def add_item(session: AsyncSession, user: User, product_id: Any) -> CartLineSet:
    pid = _require_product_id(product_id)
    product = await catalog_service.get_product(session, pid)
    if product is None:
        raise NotFound("Product not found")

    lines = load_cart(user)
    lines.add_one(pid)
    await _save_cart(session, user, lines)
    return lines


@logged_operation("cart.remove")
async def remove_product(session: AsyncSession, user: User, product_id: Any) -> CartLineSet:
    """Drop every line for ``product_id``. The product need not exist in the catalog."""
    pid = _require_product_id(product_id)
    lines = load_cart(user)
    lines.remove_all(pid)
    await _save_cart(session, user, lines)
    return lines


@logged_operation("cart.clear")
async def clear_cart(session: AsyncSession, user: User) -> CartLineSet:
    lines = CartLineSet()
    await _save_cart(session, user, lines)
    return lines


@logged_operation("cart.update_quantity")
async def update_quantity(session: AsyncSession, user: User, product_id: Any, quantity: Any) -> CartLineSet:
    """Set the absolute quantity of a line already in the cart; 0 removes the line."""
    pid = _require_product_id(product_id)
    target = _require_quantity(quantity)

    lines = load_cart(user)
    if pid not in lines:
        raise NotFound("Product not found in cart")

    lines.set_quantity(pid, target)
    await _save_cart(session, user, lines)
    return lines
