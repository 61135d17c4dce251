import logging
from dotenv import load_dotenv
from fastapi import FastAPI
from mangum import Mangum
from starlette.middleware.cors import CORSMiddleware

from bookswap import containers
from bookswap.config import settings
from bookswap.core.exception_handlers import register_exception_handlers
from bookswap.core.logging_middleware import LoggingMiddleware
from bookswap.logging_config import setup_logging
from bookswap.routers import (
    admin_router,
    auth_router,
    catalog_router,
    comment_router,
    favorites_router,
    health_router,
    message_router,
    order_router,
    posting_router,
    report_router,
    review_router,
    transaction_router,
    user_router,
)

logger = logging.getLogger("bookswap")

API_ROUTERS = (
    auth_router.router,
    user_router.router,
    transaction_router.router,
    posting_router.router,
    catalog_router.router,
    comment_router.router,
    favorites_router.router,
    message_router.router,
    order_router.router,
    report_router.router,
    review_router.router,
    admin_router.router,
)


def create_app() -> FastAPI:
    load_dotenv("bookswap/.env")
    setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        debug=settings.DEBUG,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
    )
    app.container = containers.Container()  # type: ignore

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    register_exception_handlers(app)

    for router in API_ROUTERS:
        app.include_router(router, prefix=settings.API_V1_STR)
    app.include_router(health_router.router)

    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    return app


app = create_app()

handler = Mangum(app)
