import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.routes import api_router
from app.core.config import settings
from app.core.errors import InternalError
from app.core.logging_config import configure_logging
from app.middleware.request_log import RequestLoggingMiddleware
from app.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)


def get_application() -> FastAPI:
    configure_logging(settings.log_json, settings.log_level)
    tags_metadata = [
        {"name": "cart", "description": "Shopping cart of the signed-in user"},
        {"name": "health", "description": "Liveness probe"},
    ]
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        openapi_tags=tags_metadata,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(api_router, prefix="/api/v1")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        payload = ErrorResponse(detail=exc.detail, code=getattr(exc, "code", None), error=getattr(exc, "error", None))
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(payload.model_dump()),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        payload = ErrorResponse(detail=errors, code="validation_error")
        return JSONResponse(status_code=422, content=payload.model_dump())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": request.url.path, "method": request.method})
        internal = InternalError(str(exc))
        payload = ErrorResponse(detail=internal.detail, code=internal.code, error=internal.error)
        return JSONResponse(status_code=internal.status_code, content=payload.model_dump())

    return app


app = get_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=False)
