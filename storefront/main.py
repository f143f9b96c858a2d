"""
FastAPI application entry point.
Configures routes, middleware, error handling and lifecycle events.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from storefront.config import settings
from storefront.database import close_db
from storefront.errors import StorefrontError
from storefront.logging_config import configure_logging

from storefront.api.payments import router as payments_router
from storefront.api.courses import router as courses_router
from storefront.api.webhooks.sslcommerz import router as sslcommerz_router
from storefront.api.admin.courses import router as admin_courses_router
from storefront.api.admin.gateway_settings import router as gateway_settings_router

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, PUT, OPTIONS",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifecycle manager."""
    configure_logging()
    logger.info("Starting up storefront...")

    yield

    await close_db()
    logger.info("Shutting down...")


app = FastAPI(
    title="Storefront",
    description="E-learning storefront checkout and enrollment API",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid {field}: {first.get('msg')}" if field else "Invalid request body"
    logger.warning(f"Request validation failed on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": message},
    )


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
        headers=CORS_HEADERS,
    )


# OPTIONS requests that CORSMiddleware does not treat as a preflight still get a 200.
# Registered before CORSMiddleware so that one stays outermost.
@app.middleware("http")
async def answer_options(request: Request, call_next):
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    return await call_next(request)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "env": settings.app_env,
    }


app.include_router(
    payments_router,
    prefix="/payments",
    tags=["payments"],
)
app.include_router(
    courses_router,
    prefix="/courses",
    tags=["courses"],
)
app.include_router(
    sslcommerz_router,
    prefix="/webhooks",
    tags=["webhooks"],
)
app.include_router(
    admin_courses_router,
    prefix="/admin",
    tags=["admin"],
)
app.include_router(
    gateway_settings_router,
    prefix="/admin",
    tags=["admin"],
)
