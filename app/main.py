"""
FastAPI Application Entry Point
Main application setup and route registration
"""

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.database import connect_db, disconnect_db
from app.errors import GENERIC_RETRY_MESSAGE, RegistrationError, StorageError
from app.logging_config import setup_logging
from app.middleware import NoCacheMiddleware, RateLimitMiddleware, MaintenanceMiddleware

setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Conference registration with admission and capacity control",
    version="1.0.0",
    debug=settings.DEBUG
)

# Maintenance gate runs inside the rate limiter
app.add_middleware(MaintenanceMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(NoCacheMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    if isinstance(exc, StorageError) or exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "form")]
    body = {"error": first.get("msg", "Invalid request")}
    if loc:
        body["field"] = ".".join(loc)
    return JSONResponse(status_code=400, content=body)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": GENERIC_RETRY_MESSAGE})


# Startup event
@app.on_event("startup")
async def startup():
    """Run on application startup"""
    await connect_db()
    logger.info("%s started in %s mode", settings.APP_NAME, settings.APP_ENV)


# Shutdown event
@app.on_event("shutdown")
async def shutdown():
    """Run on application shutdown"""
    await disconnect_db()
    logger.info("Shutdown complete")


# Health check endpoint
@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": "1.0.0"
    }


# Import and include routers
from app.routes import registration, payment_proofs, reference

app.include_router(registration.router, prefix="/api", tags=["Registration"])
app.include_router(payment_proofs.router, prefix="/api", tags=["Payment Proofs"])
app.include_router(reference.router, prefix="/api", tags=["Reference"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True  # Auto-reload on code changes
    )
