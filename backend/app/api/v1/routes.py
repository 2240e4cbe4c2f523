from fastapi import APIRouter

from app.api.v1 import cart

api_router = APIRouter()

api_router.include_router(cart.router)


@api_router.get("/health", tags=["health"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
