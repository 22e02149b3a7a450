"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from shared.config.settings import settings
from shared.config.logging import rest_api_logger as logger
from shared.infrastructure.correlation import CorrelationIdMiddleware
from shared.infrastructure.db import get_db
from rest_api.core.cors import configure_cors
from rest_api.core.lifespan import lifespan
from rest_api.routers.orders import router as orders_router
from rest_api.routers.inventory import router as inventory_router
from rest_api.routers.tables import router as tables_router


# Create FastAPI application
app = FastAPI(
    title="Restaurant Back-Office API",
    description="Orders, tables and inventory for restaurant operations",
    version="0.1.0",
    lifespan=lifespan,
)

# Middleware (last added runs first)
configure_cors(app)
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# Exception Handlers
# =============================================================================


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(parts) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing input is a 400, like every other validation failure."""
    detail = _format_validation_errors(exc)
    logger.warning("Request validation failed", path=request.url.path, detail=detail)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error", path=request.url.path, error=str(exc), exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Internal server error: {exc}"},
    )


# =============================================================================
# Health Check
# =============================================================================


@app.get("/api/health")
def health_check(db: Session = Depends(get_db)):
    """Health check that also verifies database connectivity."""
    checks = {
        "status": "healthy",
        "service": "rest-api",
        "environment": settings.environment,
    }
    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        checks["database"] = "unhealthy"
        checks["status"] = "degraded"
        return JSONResponse(content=checks, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    return checks


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(orders_router)
app.include_router(inventory_router)
app.include_router(tables_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=True,
    )
