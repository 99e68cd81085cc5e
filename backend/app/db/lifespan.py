import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from app.core.config import DEVICE_REPOSITORY_BACKEND, PHOTO_DIR
from app.db.database import database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Context manager for FastAPI startup and shutdown logic."""
    logger.info("Application startup sequence initiated...")

    logger.info("Creating photo directory...")
    PHOTO_DIR.mkdir(parents=True, exist_ok=True)

    if DEVICE_REPOSITORY_BACKEND == "sqlmodel":
        logger.info("Database initialization sequence...")
        await database.connect()
    else:
        logger.warning(
            "Using in-memory device repository; state is lost on shutdown."
        )

    logger.info("Application startup complete.")

    yield

    await database.disconnect()
    logger.info("Application shutdown complete.")
