from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pymongo.database import Database

from catalog.database import get_database
from catalog.services.document_service import DocumentRepository, utc_timestamp
from catalog.services.exceptions import StoreFailureError
from catalog.utils.cache import cache_service

router = APIRouter(prefix="/health", tags=["Health"])

# Store connectivity probe served at the root path
probe_router = APIRouter(tags=["Health"])


@probe_router.get(
    "/health",
    summary="Document store probe",
    description="Ping the document store."
)
def store_probe(db: Database = Depends(get_database)):
    """Report whether the document store answers."""
    try:
        DocumentRepository(db).ping()
    except StoreFailureError as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "error",
                "database": "disconnected",
                "error": str(e),
                "timestamp": utc_timestamp()
            }
        )
    return {"status": "ok", "database": "connected", "timestamp": utc_timestamp()}


@router.get(
    "/",
    summary="Health check",
    description="Basic health check endpoint."
)
@router.get("", include_in_schema=False)
def health_check():
    """Simple health check."""
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if all services (document store, Redis) are ready."
)
def readiness_check(db: Database = Depends(get_database)):
    """
    Readiness check for all dependencies.

    Returns status of:
    - Document store connection
    - Redis connection (only required when caching is enabled)
    """
    checks = {
        "database": False,
        "redis": False
    }

    try:
        checks["database"] = DocumentRepository(db).ping()
    except StoreFailureError as e:
        checks["database_error"] = str(e)

    checks["redis"] = cache_service.ping()

    all_healthy = checks["database"] and (checks["redis"] or not cache_service.enabled)

    return {
        "status": "ready" if all_healthy else "not_ready",
        "checks": checks
    }
