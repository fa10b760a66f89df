from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.price_book import build_default_price_book
from services.readings import build_default_service


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    build_default_service()
    try:
        yield
    finally:
        build_default_service.cache_clear()
        build_default_price_book.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Shift Readings",
        description="Pump meter paste parsing and shift sale reconciliation.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
