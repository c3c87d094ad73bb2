# friendai backend api
# fastapi app with mongodb or in-memory storage, jwt auth, gemini analysis and elevenlabs tts

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from friendai.config import settings
from friendai.errors import AppError
from friendai.services.db import get_storage, install_storage, open_storage
from friendai.services.storage import Storage
from friendai.routers import auth, ai, journal, tasks, goals, habits, dashboard, mood, export
from friendai.utils import utcnow

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """startup: select the storage backend. shutdown: close it."""
    logger.info("Starting FriendAI backend...")
    storage = await open_storage()
    install_storage(storage)
    logger.info(f"FriendAI backend ready (storage: {storage.backend})")
    yield
    logger.info("Shutting down FriendAI backend...")
    await storage.close()
    install_storage(None)


app = FastAPI(
    title="FriendAI API",
    description="Backend API for FriendAI: AI journaling companion with tasks, goals, habits and mood analytics",
    version=VERSION,
    lifespan=lifespan,
)

# cors: allow frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    detail = str(exc) if settings.ENVIRONMENT == "development" else "Internal server error"
    return JSONResponse(status_code=500, content={"detail": detail})


# register routers
app.include_router(auth.router)
app.include_router(ai.router)
app.include_router(journal.router)
app.include_router(tasks.router)
app.include_router(goals.router)
app.include_router(habits.router)
app.include_router(dashboard.router)
app.include_router(mood.router)
app.include_router(export.router)


@app.get("/api/health")
async def health_check(storage: Storage = Depends(get_storage)):
    """basic health check endpoint"""
    return {
        "status": "OK",
        "timestamp": utcnow().isoformat(),
        "version": VERSION,
        "storage": storage.backend,
    }
