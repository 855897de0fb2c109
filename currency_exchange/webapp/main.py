"""
FastAPI application entry point for the currency exchange admin API.

Run with:
    uvicorn currency_exchange.webapp.main:app --reload
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from currency_exchange.exceptions import AppException
from currency_exchange.utils.config_loader import load_config, load_env
from currency_exchange.utils.logging_config import setup_logging
from currency_exchange.webapp.routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    load_env()
    config = load_config()
    setup_logging(level=config.logging.level, log_format=config.logging.format)

    logger.info("Currency Exchange admin API starting...")
    yield
    logger.info("Currency Exchange admin API shutting down...")


app = FastAPI(
    title="Currency Exchange",
    description="Multi-currency price lists derived from base prices and exchange settings",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render application errors with their own status code."""
    logger.warning(f"{exc.error_code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.middleware("http")
async def error_handling_middleware(request: Request, call_next):
    """Global error handling middleware."""
    start_time = time.time()
    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.exception(f"Unhandled error processing {request.url.path}: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "INTERNAL_ERROR",
                "message": str(e) if app.debug else "An unexpected error occurred",
                "details": {"path": str(request.url.path)},
            },
            headers={"X-Process-Time": str(process_time)},
        )


@app.get("/health/simple")
async def simple_health_check() -> dict[str, Any]:
    """Simple health check for load balancers."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("currency_exchange.webapp.main:app", host="127.0.0.1", port=8000, reload=True)
