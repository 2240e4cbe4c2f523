"""Single entry/exit/error log boundary around service operations."""

import functools
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from fastapi import HTTPException

from app.core.errors import InternalError

T = TypeVar("T")

logger = logging.getLogger("app.operations")


def _operation_fields(bound: inspect.BoundArguments) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    user = bound.arguments.get("user")
    if user is not None:
        fields["user_id"] = str(getattr(user, "id", "-"))
    if "product_id" in bound.arguments:
        fields["product_id"] = str(bound.arguments["product_id"])
    return fields


def logged_operation(name: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Log one start record and one outcome record per call of the wrapped coroutine.

    HTTP errors raised by the operation propagate unchanged. Any other exception is
    logged with its traceback and re-raised as ``InternalError`` carrying the cause.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            fields = {"operation": name, **_operation_fields(signature.bind_partial(*args, **kwargs))}
            logger.info("%s started", name, extra=fields)
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except HTTPException as exc:
                logger.warning(
                    "%s rejected",
                    name,
                    extra={
                        **fields,
                        "status_code": exc.status_code,
                        "code": getattr(exc, "code", None),
                        "duration_ms": int((time.perf_counter() - start) * 1000),
                    },
                )
                raise
            except Exception as exc:
                logger.exception(
                    "%s failed",
                    name,
                    extra={**fields, "duration_ms": int((time.perf_counter() - start) * 1000)},
                )
                raise InternalError(str(exc)) from exc
            logger.info(
                "%s completed",
                name,
                extra={**fields, "duration_ms": int((time.perf_counter() - start) * 1000)},
            )
            return result

        return wrapper

    return decorator
