"""
Concrete Station Approval - Main FastAPI Application
Version: 1.2.0

Changelog:
v1.2.0 (2026-10-12): Station update orchestrator behind station/visit PATCH;
                      malformed payloads answered with 400
v1.1.0 (2026-10-05): Payments, fees, settings and document routers
v1.0.0 (2026-09-28): Initial FastAPI application
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.encoders import jsonable_encoder
from contextlib import asynccontextmanager
import logging

from config import settings, init_directories
from api import stations, visits, payments, fees
from api import settings as settings_api

init_directories()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(f'{settings.LOGS_DIR}/api.log'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Initialize database
    from models import init_db
    await init_db()

    yield

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Ready-mix concrete station approval workflow",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed payloads are client errors (400), same as service validation"""
    return JSONResponse(status_code=400,
                        content={"detail": jsonable_encoder(exc.errors())})


# Include API routers
app.include_router(stations.router, prefix="/api", tags=["Stations"])
app.include_router(visits.router, prefix="/api", tags=["Visits"])
app.include_router(payments.router, prefix="/api", tags=["Payments"])
app.include_router(fees.router, prefix="/api", tags=["Fees"])
app.include_router(settings_api.router, prefix="/api", tags=["Settings"])

# Issued certificates and operation letters
app.mount("/documents", StaticFiles(directory=settings.DOCUMENTS_DIR, check_dir=False),
          name="documents")


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "app": settings.APP_NAME
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        workers=settings.API_WORKERS
    )
