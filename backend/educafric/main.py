"""
Educafric Documents — FastAPI Application

This is the entry point for the backend. It:
1. Creates the FastAPI app instance
2. Configures CORS (so the school dashboards can talk to us)
3. Registers route handlers
4. Sets up startup/shutdown lifecycle events

Run with:
    uvicorn educafric.main:app --reload --port 8000
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from educafric.config import settings
from educafric.database import init_db
from educafric.logging import get_logger, setup_logging
from educafric.routers import bulletins, master_sheets, schools

# Import models so SQLAlchemy registers them with Base.metadata
# before init_db() calls create_all().
import educafric.models  # noqa: F401

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic.

    Code before 'yield' runs on startup.
    Code after 'yield' runs on shutdown.
    """
    # --- Startup ---
    setup_logging(settings)
    logger.info("app.starting", environment=settings.APP_ENV)
    await init_db()
    logger.info("app.database_ready")

    yield

    # --- Shutdown ---
    logger.info("app.stopping")


app = FastAPI(
    title="Educafric Documents API",
    description="Official school documents (bulletins, master sheets) as PDF",
    version="1.0.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
app.include_router(bulletins.router)
app.include_router(master_sheets.router)
app.include_router(schools.router)


# --- Health Check Endpoints ---

@app.get("/", tags=["health"])
async def root():
    """Root endpoint — confirms the API is alive."""
    return {
        "service": "Educafric Documents",
        "status": "running",
        "version": "1.0.0",
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Detailed health check — verifies database connectivity."""
    from sqlalchemy import text

    from educafric.database import AsyncSessionLocal

    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error("health.database_error", error=str(e))
        db_status = f"error: {str(e)}"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "environment": settings.APP_ENV,
    }
