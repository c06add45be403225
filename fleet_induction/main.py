# fleet_induction/main.py
from datetime import datetime, timezone
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from fleet_induction import __version__
from fleet_induction.api import induction
from fleet_induction.config import settings

# Configure logging
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Fleet Induction Planner",
    description="Nightly trainset induction ranking with a hard fitness-certificate gate",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# GZip for responses
app.add_middleware(GZipMiddleware, minimum_size=1024)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(induction.router, prefix="/api/induction", tags=["Induction"])


@app.get("/")
async def root():
    """Root endpoint with system information"""
    return {
        "message": "Fleet Induction Planner API",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": settings.environment or "development",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting Fleet Induction Planner on {settings.api_host}:{settings.api_port}")
    uvicorn.run("fleet_induction.main:app", host=settings.api_host, port=settings.api_port, reload=settings.debug)
