import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from farmsync.api.v1.routes_products import router as products_router
from farmsync.api.v1.routes_sales import router as sales_router
from farmsync.api.v1.routes_sync import router as sync_router
from farmsync.core.config import settings
from farmsync.core.errors import FarmSyncError
from farmsync.core.logging_config import setup_logging
from farmsync.core.time_utils import to_utc_iso, utcnow
from farmsync.db.base import engine, get_db, init_models
from farmsync.domain.status.service import database_status

setup_logging(settings.SERVICE_NAME, level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.SERVICE_NAME}...")
    if settings.CREATE_TABLES_ON_STARTUP:
        await init_models()
        logger.info("Database tables initialized")

    yield

    logger.info(f"Shutting down {settings.SERVICE_NAME}...")
    await engine.dispose()


app = FastAPI(title="Farm Sync", version="1.0.0", lifespan=lifespan)

app.include_router(products_router)
app.include_router(sales_router)
app.include_router(sync_router)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


@app.exception_handler(FarmSyncError)
async def farmsync_error_handler(request: Request, exc: FarmSyncError):
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0]
    # Drop the "body"/"query" prefix and the union member names FastAPI adds.
    location = ".".join(
        str(part) for part in first["loc"]
        if part not in ("body", "query", "SaleUpsertRequest", "SaleRecordRequest")
    )
    message = f"{location}: {first['msg']}" if location else first["msg"]
    return _error(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error(404, "Endpoint not found")
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error(500, "Internal server error")


@app.get("/health")
async def health():
    return {"ok": True, "now": to_utc_iso(utcnow())}


@app.get("/status")
async def status(db: AsyncSession = Depends(get_db)):
    return await database_status(db)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
