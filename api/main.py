"""
FastAPI main application for Cedora
"""
import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from core.config import settings
from core.logging import setup_logging
from middleware.logging_middleware import RequestLoggingMiddleware
from routers import preview, products
from services.google_ai_service import google_ai_service
from services.session_store import session_store

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Cedora API...")

    google_key = settings.google_ai_api_key or os.getenv("GOOGLE_AI_API_KEY", "")
    if google_key:
        key_preview = f"{google_key[:7]}...{google_key[-4:]}" if len(google_key) > 11 else "***"
        logger.info(f"GOOGLE_AI_API_KEY is set: {key_preview}")
    else:
        logger.error("GOOGLE_AI_API_KEY is NOT set - AI room preview will not work!")

    logger.info(f"Image model: {settings.google_ai_image_model}")

    yield

    logger.info("Shutting down Cedora API...")
    session_store.close_all()
    await google_ai_service.close()
    logger.info("Application stopped")


app = FastAPI(
    title=settings.app_name,
    description="Furniture catalog and AI room preview API",
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.version,
        "open_sessions": len(session_store.sessions),
    }


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "docs": "/docs" if settings.environment == "development" else None,
        "endpoints": {
            "products": "/api/products",
            "preview": "/api/preview",
        },
    }


app.include_router(products.router, prefix="/api")
app.include_router(preview.router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_config=None,  # Use our custom logging
        access_log=False,  # We handle this in middleware
    )
