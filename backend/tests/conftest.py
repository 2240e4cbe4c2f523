import asyncio
import os
import uuid
from collections.abc import Generator
from decimal import Decimal
from typing import Any

import pytest

# Point the app at SQLite before it builds its default engine.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import get_session
from app.main import app
from app.models.catalog import Product
from app.models.user import User


def make_session_factory(url: str = "sqlite+aiosqlite:///:memory:"):
    engine = create_async_engine(url, future=True)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

    async def init_models() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(init_models())
    return engine, SessionLocal


@pytest.fixture
def session_factory() -> Generator[Any, None, None]:
    engine, SessionLocal = make_session_factory()
    yield SessionLocal
    asyncio.run(engine.dispose())


@pytest.fixture
def client(session_factory) -> Generator[TestClient, None, None]:
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    test_client = TestClient(app)
    yield test_client
    test_client.close()
    app.dependency_overrides.clear()


def create_user(session_factory, email: str = "cart@example.com", cart_items: Any = None) -> uuid.UUID:
    async def create() -> uuid.UUID:
        async with session_factory() as session:
            user = User(email=email, hashed_password="not-a-real-hash", name="Cart User", cart_items=cart_items or [])
            session.add(user)
            await session.commit()
            return user.id

    return asyncio.run(create())


def set_stored_cart(session_factory, user_id: uuid.UUID, cart_items: Any) -> None:
    async def store() -> None:
        async with session_factory() as session:
            user = await session.get(User, user_id)
            user.cart_items = cart_items
            await session.commit()

    asyncio.run(store())


def stored_cart(session_factory, user_id: uuid.UUID) -> Any:
    async def load() -> Any:
        async with session_factory() as session:
            user = await session.get(User, user_id)
            return user.cart_items

    return asyncio.run(load())


def seed_product(session_factory, name: str = "Denim Jacket", price: str = "10.00", **fields: Any) -> uuid.UUID:
    async def seed() -> uuid.UUID:
        async with session_factory() as session:
            product = Product(
                name=name,
                description=fields.pop("description", f"{name} description"),
                price=Decimal(price),
                image=fields.pop("image", "/media/product.png"),
                category=fields.pop("category", "jackets"),
                is_featured=fields.pop("is_featured", False),
            )
            session.add(product)
            await session.commit()
            return product.id

    return asyncio.run(seed())


def auth_headers(user_id: uuid.UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}
