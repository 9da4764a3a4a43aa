import logging
import os

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from lookbook.config import settings
from lookbook.core.exceptions import (
    LookbookException,
    generic_exception_handler,
    http_exception_handler,
    lookbook_exception_handler,
)
from lookbook.database import Base, engine
from lookbook.routers import outfits
from lookbook.schemas import HealthResponse
from lookbook.utils.cache import CompletionCache

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create catalog tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Lookbook API",
    description="Outfit assembly from a product catalog",
    version="1.0.0"
)

# The completion cache lives with the app and is handed to each pipeline run
app.state.completion_cache = CompletionCache(
    maxsize=settings.COMPLETION_CACHE_SIZE, ttl=settings.COMPLETION_CACHE_TTL
)

# CORS configuration: comma-separated CORS_ORIGINS in production, open otherwise
allowed_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins if settings.ENVIRONMENT == "production" and allowed_origins else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(LookbookException, lookbook_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(outfits.router)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check: database reachability and whether a completion provider is configured"""
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except Exception as e:
        logger.warning(f"Health check database probe failed: {e}")

    return HealthResponse(
        status="ok",
        llm_configured=settings.llm_configured,
        database="connected" if db_ok else "unavailable",
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Welcome to the Lookbook API",
        "version": app.version,
        "docs": "/docs"
    }
