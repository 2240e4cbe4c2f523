"""The cart line set embedded in a user aggregate.

A ``CartLineSet`` holds at most one ``CartLine`` per product and every line has a
quantity of at least 1; a product whose quantity drops to zero is simply absent.
Stored JSON is parsed once, in ``CartLineSet.from_storage``, and everything after
that works on validated lines only.
"""

import logging
import uuid
from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


def parse_product_id(value: Any) -> uuid.UUID | None:
    """Return ``value`` as a catalog product id, or None when it is not one."""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class CartLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product: uuid.UUID
    quantity: int = Field(ge=1, strict=True)


class DuplicateCartLine(ValueError):
    pass


class CartLineSet:
    def __init__(self, lines: Iterable[CartLine] = ()) -> None:
        self._lines: list[CartLine] = []
        for line in lines:
            if self.get(line.product) is not None:
                raise DuplicateCartLine(f"Product {line.product} appears more than once")
            self._lines.append(line)

    @classmethod
    def from_storage(cls, raw: Any, *, owner: Any = None) -> "CartLineSet":
        """Build a line set from the persisted JSON array.

        Entries that do not validate are skipped and duplicate products are folded
        into their first occurrence. Nothing is written back here; the repaired form
        reaches storage with the next saved mutation.
        """
        if not isinstance(raw, list):
            if raw is not None:
                logger.warning("Stored cart is not a list, treating as empty", extra={"user_id": str(owner)})
            return cls()

        merged: dict[uuid.UUID, int] = {}
        for entry in raw:
            line = _line_from_entry(entry)
            if line is None:
                logger.warning("Skipping malformed cart line", extra={"user_id": str(owner), "entry": entry})
                continue
            if line.product in merged:
                logger.warning(
                    "Merging duplicate cart line",
                    extra={"user_id": str(owner), "product_id": str(line.product)},
                )
                merged[line.product] += line.quantity
            else:
                merged[line.product] = line.quantity
        return cls(CartLine(product=product, quantity=quantity) for product, quantity in merged.items())

    def to_storage(self) -> list[dict[str, Any]]:
        return [{"product": str(line.product), "quantity": line.quantity} for line in self._lines]

    def __iter__(self) -> Iterator[CartLine]:
        return iter(list(self._lines))

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, product_id: object) -> bool:
        return isinstance(product_id, uuid.UUID) and self.get(product_id) is not None

    def get(self, product_id: uuid.UUID) -> CartLine | None:
        return next((line for line in self._lines if line.product == product_id), None)

    def product_ids(self) -> list[uuid.UUID]:
        return [line.product for line in self._lines]

    def add_one(self, product_id: uuid.UUID) -> CartLine:
        """Append a line with quantity 1, or bump an existing line by exactly one."""
        for index, line in enumerate(self._lines):
            if line.product == product_id:
                updated = CartLine(product=product_id, quantity=line.quantity + 1)
                self._lines[index] = updated
                return updated
        created = CartLine(product=product_id, quantity=1)
        self._lines.append(created)
        return created

    def set_quantity(self, product_id: uuid.UUID, quantity: int) -> CartLine | None:
        """Set an existing line to ``quantity``; zero or less removes it.

        Raises ``KeyError`` when the product has no line. Returns the updated line,
        or None when the line was removed.
        """
        if self.get(product_id) is None:
            raise KeyError(product_id)
        if quantity <= 0:
            self.remove_all(product_id)
            return None
        updated = CartLine(product=product_id, quantity=quantity)
        self._lines = [updated if line.product == product_id else line for line in self._lines]
        return updated

    def remove_all(self, product_id: uuid.UUID) -> int:
        before = len(self._lines)
        self._lines = [line for line in self._lines if line.product != product_id]
        return before - len(self._lines)

    def clear(self) -> None:
        self._lines = []

    def __repr__(self) -> str:
        return f"CartLineSet({self.to_storage()!r})"


def _line_from_entry(entry: Any) -> CartLine | None:
    if not isinstance(entry, dict):
        return None
    product = parse_product_id(entry.get("product"))
    if product is None:
        return None
    try:
        return CartLine(product=product, quantity=entry.get("quantity"))
    except ValidationError:
        return None
