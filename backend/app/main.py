import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# Import lifespan manager and API router
from app.db.lifespan import lifespan
from app.api.v1.router import api_router
from app.core.config import API_PREFIX, CORS_ORIGINS, PHOTO_DIR, PHOTO_MOUNT_PATH

logger = logging.getLogger(__name__)

# Create FastAPI app instance using the lifespan manager
app = FastAPI(
    title="Device Check-in Registry API",
    description="API for checking computers, medical devices and frequent computers in and out of a facility.",
    version="0.1.0",
    lifespan=lifespan,  # Use the imported lifespan context manager
)

# --- Static Files Mount ---
# 確保照片目錄存在，StaticFiles 在掛載時會檢查目錄
PHOTO_DIR.mkdir(parents=True, exist_ok=True)
app.mount(PHOTO_MOUNT_PATH, StaticFiles(directory=PHOTO_DIR), name="photos")
logger.info(f"Mounted photo directory '{PHOTO_DIR}' at '{PHOTO_MOUNT_PATH}'.")

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,  # 使用明確的域名列表而不是 ["*"]
    allow_credentials=True,
    allow_methods=["*"],  # 允許所有方法
    allow_headers=["*"],  # 允許所有頭部
)
logger.info(f"CORS middleware added with origins: {CORS_ORIGINS}")


# --- Test Endpoint (Before API v1 Router) ---
@app.get("/ping", tags=["Test"])
async def ping():
    return {"message": "pong"}


# --- Include API Routers ---
app.include_router(api_router, prefix=API_PREFIX)
logger.info(f"Included API router v1 at {API_PREFIX}.")


# --- Root Endpoint ---
@app.get("/", tags=["Root"])
async def read_root():
    """Provides a basic welcome message."""
    return {"message": "Welcome to the Device Check-in Registry API"}


# --- Uvicorn Entry Point (for direct run, if needed) ---
# Recommended: `uvicorn app.main:app --reload` from the backend directory.
if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Uvicorn server directly...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
