from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lotstock.api.routes_inventory import router as inventory_router
from lotstock.core.config import get_settings
from lotstock.core.errors import AllocationInputError, InsufficientStockError, StockConflictError
from lotstock.core.logging import configure_logging
from lotstock.persistence.pg import init_db

configure_logging()
logger = logging.getLogger(__name__)
settings = get_settings()

app = FastAPI(title=settings.app_name)


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    logger.info("database ready: env=%s", settings.env)


@app.exception_handler(InsufficientStockError)
async def insufficient_stock_handler(_: Request, exc: InsufficientStockError):
    return JSONResponse(
        status_code=409,
        content={
            "detail": str(exc),
            "error": "insufficient_stock",
            "requested": exc.requested,
            "available": exc.available,
        },
    )


@app.exception_handler(StockConflictError)
async def stock_conflict_handler(_: Request, exc: StockConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc), "error": "stock_conflict"})


@app.exception_handler(AllocationInputError)
async def allocation_input_handler(_: Request, exc: AllocationInputError):
    return JSONResponse(status_code=422, content={"detail": str(exc), "error": "invalid_allocation"})


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


app.include_router(inventory_router)
