from contextlib import asynccontextmanager

from fastapi import FastAPI
from stockbridge.routers import barcode, products, inventory
from stockbridge.routers import health
from stockbridge.core import config
from stockbridge.core.logging import setup_logging
from stockbridge.core.middleware import RequestLoggingMiddleware
from stockbridge.services.common import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Stock Bridge", version=config.APP_VERSION, lifespan=lifespan)
    app.include_router(barcode.router)
    app.include_router(products.router)
    app.include_router(inventory.router)
    app.include_router(health.router)

    setup_logging()

    app.add_middleware(RequestLoggingMiddleware)

    return app

app = create_app()
