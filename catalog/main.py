from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from catalog.config import get_settings
from catalog.database import client
from catalog.api import browse, documents, health, products, sales
from catalog.services.exceptions import (
    DocumentTooLargeError,
    StoreFailureError,
    StoreUnavailableError,
)

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Starting up application...")
    logger.info(f"Document store: {settings.MONGO_URI} database '{settings.DB_NAME}'")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    client.close()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Catalog manager for a clothing store:

    - **Document API**: Generic REST access to any collection with query-string filters
    - **Products**: Product CRUD and per-size inventory
    - **Sales**: Sales that keep inventory in step
    - **Catalog**: Public search over the whole product set

    ## Filters
    `GET /api/products?price[gte]=100&price[lte]=200&order=price.desc&limit=2`

    Operators: `eq, neq, gt, gte, lt, lte, like, ilike, in`.

    ## Stock
    Stock lives in each product's `inventory` map. Recording a sale checks
    stock and then decrements it; deleting a sale gives the units back.
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DocumentTooLargeError)
def document_too_large_handler(request: Request, exc: DocumentTooLargeError):
    return JSONResponse(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        content={"error": "document_too_large", "detail": str(exc)}
    )


@app.exception_handler(StoreUnavailableError)
def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "store_unavailable", "detail": "The document store is unreachable"}
    )


@app.exception_handler(StoreFailureError)
def store_failure_handler(request: Request, exc: StoreFailureError):
    logger.error(f"Store failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "store_failure", "detail": "The document store failed to process the request"}
    )


# Include API routers; typed routes go before the generic collection routes
app.include_router(health.probe_router)
app.include_router(health.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")
app.include_router(sales.router, prefix="/api/v1")
app.include_router(browse.router, prefix="/api/v1")
app.include_router(documents.router, prefix="/api")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health"
    }
