import random
import uuid

import pytest
from pydantic import ValidationError

from app.services.cart_lines import CartLine, CartLineSet, DuplicateCartLine, parse_product_id

P1 = uuid.UUID("6f1c2f0e-8a51-4a43-9a55-3f7a2b8c9d01")
P2 = uuid.UUID("0b9d7e6c-1f2a-4b3c-8d4e-5f6a7b8c9d02")


def test_parse_product_id_accepts_uuid_strings_only():
    assert parse_product_id(str(P1)) == P1
    assert parse_product_id(P1) is P1
    assert parse_product_id("P2") is None
    assert parse_product_id("") is None
    assert parse_product_id(None) is None
    assert parse_product_id(42) is None
    assert parse_product_id({"id": str(P1)}) is None


def test_cart_line_rejects_non_positive_or_non_integer_quantity():
    assert CartLine(product=P1, quantity=3).quantity == 3
    for bad in (0, -1, 1.5, "2", True):
        with pytest.raises(ValidationError):
            CartLine(product=P1, quantity=bad)


def test_constructor_rejects_duplicate_products():
    with pytest.raises(DuplicateCartLine):
        CartLineSet([CartLine(product=P1, quantity=1), CartLine(product=P1, quantity=2)])


def test_add_one_appends_then_increments():
    lines = CartLineSet()
    lines.add_one(P1)
    lines.add_one(P2)
    lines.add_one(P1)
    assert lines.to_storage() == [
        {"product": str(P1), "quantity": 2},
        {"product": str(P2), "quantity": 1},
    ]


def test_set_quantity_is_absolute_and_zero_removes():
    lines = CartLineSet([CartLine(product=P1, quantity=4)])
    assert lines.set_quantity(P1, 5).quantity == 5
    assert lines.set_quantity(P1, 3).quantity == 3
    assert lines.set_quantity(P1, 0) is None
    assert P1 not in lines
    with pytest.raises(KeyError):
        lines.set_quantity(P1, 1)


def test_remove_all_and_clear():
    lines = CartLineSet([CartLine(product=P1, quantity=1), CartLine(product=P2, quantity=2)])
    assert lines.remove_all(P1) == 1
    assert lines.remove_all(P1) == 0
    assert lines.product_ids() == [P2]
    lines.clear()
    assert len(lines) == 0
    assert lines.to_storage() == []


def test_from_storage_skips_malformed_entries():
    raw = [
        {"product": str(P1), "quantity": 2},
        {"product": "not-an-id", "quantity": 1},
        {"product": str(P2), "quantity": 0},
        {"quantity": 3},
        "garbage",
        None,
    ]
    lines = CartLineSet.from_storage(raw)
    assert lines.to_storage() == [{"product": str(P1), "quantity": 2}]


@pytest.mark.parametrize("raw", [None, {}, "[]", 7])
def test_from_storage_non_list_is_empty(raw):
    assert len(CartLineSet.from_storage(raw)) == 0


def test_from_storage_merges_duplicates_into_first_position():
    raw = [
        {"product": str(P1), "quantity": 1},
        {"product": str(P2), "quantity": 1},
        {"product": str(P1), "quantity": 2},
    ]
    lines = CartLineSet.from_storage(raw)
    assert lines.to_storage() == [
        {"product": str(P1), "quantity": 3},
        {"product": str(P2), "quantity": 1},
    ]


def test_to_storage_returns_fresh_list():
    lines = CartLineSet([CartLine(product=P1, quantity=1)])
    first = lines.to_storage()
    first.append({"product": "x", "quantity": 1})
    assert lines.to_storage() == [{"product": str(P1), "quantity": 1}]
    assert lines.to_storage() is not lines.to_storage()


def test_random_operation_sequences_keep_invariants():
    rng = random.Random(1234)
    products = [uuid.UUID(int=i + 1) for i in range(4)]
    lines = CartLineSet()
    for _ in range(500):
        product = rng.choice(products)
        op = rng.choice(["add", "set", "remove", "clear"])
        if op == "add":
            lines.add_one(product)
        elif op == "set" and product in lines:
            lines.set_quantity(product, rng.randint(0, 5))
        elif op == "remove":
            lines.remove_all(product)
        elif op == "clear" and rng.random() < 0.1:
            lines.clear()
        stored = lines.to_storage()
        ids = [entry["product"] for entry in stored]
        assert len(ids) == len(set(ids))
        assert all(entry["quantity"] >= 1 for entry in stored)
