import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from order_api.core.config import settings
from order_api.core.errors import (
    OrderError, AuthenticationError, CallerInputError, CatalogInconsistencyError,
    ConfigurationError, RestaurantClosedError,
)
from order_api.core.logging import configure_logging
from order_api.api.routes import api_router
from order_api.db.session import engine
from order_api.db.base import Base

logger = logging.getLogger(__name__)

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})

def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Restaurant Order API",
        version="0.1.0",
        openapi_url="/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.exception_handler(OrderError)
    def handle_order_error(request: Request, exc: OrderError):
        if isinstance(exc, AuthenticationError):
            logger.info(f"[auth] rejected {request.url.path}: {exc.reason}")
        elif isinstance(exc, ConfigurationError):
            logger.error(f"[config] {request.url.path} failed: {exc.reason}")
        elif isinstance(exc, (CallerInputError, CatalogInconsistencyError, RestaurantClosedError)):
            logger.info(f"[request] {request.url.path} rejected: {exc.public_message}")
        elif exc.status_code >= 500:
            logger.error(f"[request] {request.url.path} failed: {exc}")
        return _error(exc.status_code, exc.public_message)

    @app.exception_handler(RequestValidationError)
    def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.info(f"[request] {request.url.path} invalid body: {exc.errors()}")
        return _error(400, "Invalid request body")

    @app.exception_handler(Exception)
    def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"[request] {request.url.path} unexpected error")
        return _error(500, "Internal error")

    @app.on_event("startup")
    def on_startup():
        # 데모 편의: 필요 시 테이블 자동 생성
        if settings.CREATE_TABLES:
            Base.metadata.create_all(bind=engine)

    return app

app = create_app()
