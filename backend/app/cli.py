import argparse
import asyncio
import json
from decimal import Decimal
from typing import Any

from sqlalchemy import select

from app.core import security
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models.catalog import Product
from app.models.user import User
from app.services import cart as cart_service

DEMO_PRODUCTS: list[dict[str, Any]] = [
    {
        "name": "Denim Jacket",
        "description": "Washed blue denim with brass buttons.",
        "price": Decimal("79.99"),
        "image": "/media/products/denim-jacket.jpg",
        "category": "jackets",
        "is_featured": True,
    },
    {
        "name": "Canvas Sneakers",
        "description": "Low-top sneakers in off-white canvas.",
        "price": Decimal("49.00"),
        "image": "/media/products/canvas-sneakers.jpg",
        "category": "shoes",
        "is_featured": False,
    },
    {
        "name": "Aviator Sunglasses",
        "description": "Polarized lenses, gold frame.",
        "price": Decimal("120.00"),
        "image": "/media/products/aviators.jpg",
        "category": "glasses",
        "is_featured": True,
    },
]


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _get_user_by_email(session, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


def _normalize_email(raw: str) -> str:
    email = (raw or "").strip().lower()
    if "@" not in email:
        raise SystemExit("A valid email is required")
    return email


async def create_user(*, email: str, password: str, name: str | None = None) -> dict[str, str]:
    email_norm = _normalize_email(email)
    if len(password or "") < 6:
        raise SystemExit("Password must be at least 6 characters")
    async with SessionLocal() as session:
        if await _get_user_by_email(session, email_norm):
            raise SystemExit(f"User already exists: {email_norm}")
        user = User(email=email_norm, hashed_password=security.hash_password(password), name=name, cart_items=[])
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return {"id": str(user.id), "access_token": security.create_access_token(str(user.id))}


async def issue_token(*, email: str, password: str) -> str:
    async with SessionLocal() as session:
        user = await _get_user_by_email(session, _normalize_email(email))
        if not user or not security.verify_password(password, user.hashed_password):
            raise SystemExit("Invalid credentials")
        return security.create_access_token(str(user.id))


async def seed_products() -> list[str]:
    async with SessionLocal() as session:
        existing = set((await session.execute(select(Product.name))).scalars().all())
        created = [Product(**payload) for payload in DEMO_PRODUCTS if payload["name"] not in existing]
        session.add_all(created)
        await session.commit()
        return [str(product.id) for product in created]


async def show_cart(*, email: str) -> list[dict[str, Any]]:
    async with SessionLocal() as session:
        user = await _get_user_by_email(session, _normalize_email(email))
        if not user:
            raise SystemExit(f"User not found: {email}")
        return cart_service.load_cart(user).to_storage()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Storefront cart developer utilities")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", help="Create database tables from the ORM models")

    create = subparsers.add_parser("create-user", help="Create a user with an empty cart and print an access token")
    create.add_argument("--email", required=True)
    create.add_argument("--password", required=True)
    create.add_argument("--name", default=None)

    token = subparsers.add_parser("issue-token", help="Print an access token for an existing user")
    token.add_argument("--email", required=True)
    token.add_argument("--password", required=True)

    subparsers.add_parser("seed-products", help="Insert the demo catalog")

    cart = subparsers.add_parser("show-cart", help="Print the stored cart lines of a user")
    cart.add_argument("--email", required=True)
    return parser


def _run_cli_command(args: argparse.Namespace) -> bool:
    if args.command == "init-db":
        asyncio.run(init_db())
        return True

    if args.command == "create-user":
        print(json.dumps(asyncio.run(create_user(email=args.email, password=args.password, name=args.name))))
        return True

    if args.command == "issue-token":
        print(asyncio.run(issue_token(email=args.email, password=args.password)))
        return True

    if args.command == "seed-products":
        print(json.dumps(asyncio.run(seed_products())))
        return True

    if args.command == "show-cart":
        print(json.dumps(asyncio.run(show_cart(email=args.email)), indent=2))
        return True

    return False


def main():
    parser = _build_parser()
    args = parser.parse_args()
    if not _run_cli_command(args):
        parser.print_help()


if __name__ == "__main__":
    main()
