from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

# Database migrations are managed exclusively via Alembic
from app.routers import sync
from app.core.config import settings
from app.core.deps import get_sync_registry

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # NOTE: Database migrations are managed by Alembic exclusively.
    # Run: alembic upgrade head
    logger.info("Starting application...")

    registry = get_sync_registry()
    logger.info(f"✓ Sync registry loaded ({len(registry)} entities)")

    logger.info("Application startup complete")

    yield

    logger.info("Application shutdown complete")

app = FastAPI(
    title="POS Sync Backend",
    description="Offline-first synchronization API for point-of-sale tills",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,  # Back-office URL from settings
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sync.router)           # Sync: /sync/* (offline-first)

@app.get("/")
def read_root():
    return {
        "message": "Welcome to POS Sync Backend API",
        "version": "1.0.0",
        "modules": {
            "sync": "/sync/* (batch push, incremental pull, conflict resolution, stats)"
        },
        "docs": "/docs",
        "redoc": "/redoc"
    }

@app.get("/health")
def health_check():
    return {"status": "healthy"}
