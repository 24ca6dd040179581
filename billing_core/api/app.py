"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from billing_core.api.error import ClientError
from billing_core.api.middleware import RequestLoggingMiddleware
from billing_core.api.routes import admin_coupons, coupons, cron, subscription, usage
from billing_core.domain.errors import BillingError, NotFoundError, StateConflictError

logger = logging.getLogger(__name__)


def billing_error_status(exc: BillingError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, StateConflictError):
        return 409
    return 400


def init_sentry(config) -> None:
    if not config.ENABLE_SENTRY or not config.DSN_SENTRY:
        return

    import sentry_sdk

    sentry_sdk.init(
        dsn=config.DSN_SENTRY,
        environment=config.SENTRY_ENVIRONMENT,
        traces_sample_rate=0.1,
    )
    logger.info(f"Sentry enabled for environment {config.SENTRY_ENVIRONMENT}")


def create_app(config) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    init_sentry(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(config, "DB_CREATE_TABLES", False):
            from billing_core.depends import create_tables

            await create_tables()
        yield

    app = FastAPI(
        title="Registration Billing Core",
        description="Subscription lifecycle, usage limits and coupons",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(BillingError)
    async def billing_error_handler(request: Request, exc: BillingError):
        return JSONResponse(
            status_code=billing_error_status(exc),
            content={"error": {"code": exc.code, "message": exc.message}},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        messages = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "; ".join(messages) or "Invalid request parameters",
                }
            },
        )

    for router in (
        usage.router,
        subscription.router,
        coupons.router,
        admin_coupons.router,
        cron.router,
    ):
        app.include_router(router, prefix=config.API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app
