"""
FastAPI application entry point for the Axtarget job board.

This is the main app that:
- Initializes FastAPI with CORS
- Builds the process-wide document store and identity provider
- Registers all API routers
- Provides health check endpoint
- Sets up database connection lifecycle
"""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobboard import database
from jobboard.config import settings
from jobboard.database import Base
import jobboard.models  # noqa: F401 ensure models are registered on Base
from jobboard.services.identity import IdentityProvider
from jobboard.services.store import DocumentStore
# Import API routers
from jobboard.api import auth, listings, contact

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    
    On startup: Create tables, build the store and identity provider once
    On shutdown: Stop the snapshot refresher, close database connections
    """
    # Startup
    logger.info("🚀 Starting job board API...")
    logger.info(f"📊 Database: {settings.database_url.split('@')[1] if '@' in settings.database_url else 'configured'}")
    logger.info(f"📁 Collection: {settings.collection_path()}")
    logger.info(f"🔧 Debug mode: {settings.debug}")
    
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    app.state.store = DocumentStore(database.AsyncSessionLocal)
    app.state.identity = IdentityProvider(database.AsyncSessionLocal)
    
    refresher = None
    if settings.snapshot_refresh_seconds > 0:
        refresher = asyncio.create_task(app.state.store.run_refresher(settings.snapshot_refresh_seconds))
    
    yield
    
    # Shutdown
    logger.info("👋 Shutting down job board API...")
    if refresher is not None:
        refresher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await refresher
    await database.engine.dispose()


# Initialize FastAPI app
app = FastAPI(
    title="Axtarget Job Board API",
    description="Job seeker and employer listings with moderation before publishing",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# Configure CORS
# Set ALLOWED_ORIGINS environment variable with comma-separated domains
allowed_origins = [
    "http://localhost:3000",  # Local development
]

if settings.allowed_origins:
    allowed_origins.extend(origin.strip() for origin in settings.allowed_origins.split(',') if origin.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "service": "Axtarget Job Board API",
        "version": "1.0.0",
    }


# Root endpoint
@app.get("/")
async def root():
    """API root with basic info."""
    return {
        "message": "Axtarget Job Board API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


# Register API routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(listings.router, prefix="/api/listings", tags=["listings"])
app.include_router(contact.router, prefix="/api/contact", tags=["contact"])
