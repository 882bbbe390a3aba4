"""FastAPI application entry point."""

import logging
import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from printshop.api.v1.admin import router as admin_router
from printshop.api.v1.orders import router as orders_router
from printshop.api.v1.pricing import router as pricing_router
from printshop.config import settings
from printshop.database import dispose_engine
from printshop.pricing.cache import MatrixCache

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer() if settings.environment == "development"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.log_level.upper(), logging.INFO)
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info(
        "app_starting",
        environment=settings.environment,
        shared_cache=bool(settings.redis_url),
    )
    yield
    await dispose_engine()
    logger.info("app_shutting_down")


app = FastAPI(
    title=settings.app_title,
    description="Matrix-based pricing and option constraints for book printing orders",
    version="0.1.0",
    lifespan=lifespan,
)

# Process-wide matrix cache, shared by every request of this worker
app.state.matrix_cache = MatrixCache(ttl=settings.matrix_cache_ttl_seconds)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies get the same 400 envelope as pricing rejections."""
    errors = exc.errors()
    loc = [part for part in (errors[0]["loc"] if errors else ()) if part != "body"]
    field = str(loc[0]) if loc else ""
    logger.info("request_rejected", path=request.url.path, field=field, errors=len(errors))
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "code": "invalid_request",
            "field": field,
            "message": "درخواست نامعتبر است",
            "errors": jsonable_encoder(errors),
        },
    )


# Include routers
app.include_router(pricing_router)
app.include_router(admin_router)
app.include_router(orders_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_title,
        "version": "0.1.0",
        "status": "running",
    }
