import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config

# Validate critical configuration before the app is built
from utils.config_validator import validate_or_exit
validate_or_exit(config)

from db import create_db_and_tables
from enums.error_code import ErrorCode
from middleware.security_headers import SecurityHeadersMiddleware
from utils.error_handler import ActionResult, GENERIC_ERROR_MESSAGE
from web.admin_router import admin_router
from web.api_router import api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    await create_db_and_tables()
    logging.info(f"[Startup] Storefront ready (environment={config.RUNTIME_ENVIRONMENT.value}, "
                 f"order placement={config.ORDER_PLACEMENT_MODE})")
    yield
    logging.warning('Shutting down..')


app = FastAPI(lifespan=lifespan, title="Storefront Core")

if config.SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware)
    logging.info("[Startup] Security headers middleware enabled")
else:
    logging.debug("[Startup] Security headers middleware disabled")

if config.CORS_ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "X-Identity-Token"],
    )
    logging.info(f"[Startup] CORS middleware enabled for origins: {config.CORS_ALLOWED_ORIGINS}")
else:
    logging.debug("[Startup] CORS middleware disabled (no allowed origins configured)")

app.include_router(api_router)
app.include_router(admin_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for container monitoring."""
    return {"status": "healthy"}


@app.exception_handler(Exception)
async def exception_handler(request: Request, exc: Exception):
    logging.error(f"Unhandled exception on {request.method} {request.url.path}: {type(exc).__name__}",
                  exc_info=exc)
    result = ActionResult.fail(ErrorCode.INTERNAL, GENERIC_ERROR_MESSAGE)
    return JSONResponse(status_code=500, content=result.model_dump(mode="json"))
