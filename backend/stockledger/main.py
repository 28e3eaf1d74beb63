"""
StockLedger - Backend API
Per-user inventory with atomic sell and undo
"""
import time
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables before settings are read
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stockledger.api import products, purchases, repair_orders, sales
from stockledger.core.config import settings
from stockledger.core.exceptions import StockLedgerError
from stockledger.core.logging_config import configure_logging
from stockledger.core.storage import get_storage
from stockledger.storage.base import StorageAdapter

configure_logging(settings.LOG_LEVEL)

# Create FastAPI application
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    debug=settings.API_DEBUG,
)

# Any origin by default: the mobile client calls from arbitrary hosts
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)


@app.exception_handler(StockLedgerError)
async def stockledger_error_handler(request: Request, exc: StockLedgerError):
    """One error body for every engine failure: stable kind plus message"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include API routers
app.include_router(products.router, prefix="/products", tags=["Products"])
app.include_router(sales.router, prefix="/sales", tags=["Sales"])
app.include_router(purchases.router, prefix="/purchases", tags=["Purchases"])
app.include_router(repair_orders.router, prefix="/repair-orders", tags=["Repair Orders"])


@app.get("/")
async def root():
    """Root endpoint - API status"""
    return {
        "message": "StockLedger API",
        "status": "online",
        "version": settings.API_VERSION,
    }


@app.get("/health")
def health(storage: StorageAdapter = Depends(get_storage)):
    """Health check endpoint - tests storage connectivity"""
    start_time = time.time()
    storage_ok = storage.ping()
    latency_ms = round((time.time() - start_time) * 1000, 2)

    return {
        "status": "healthy" if storage_ok else "degraded",
        "service": "stockledger-api",
        "version": settings.API_VERSION,
        "storage": {
            "backend": type(storage).__name__,
            "status": "connected" if storage_ok else "disconnected",
            "latency_ms": latency_ms,
        },
    }
