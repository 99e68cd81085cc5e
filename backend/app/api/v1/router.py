# backend/app/api/v1/router.py
from fastapi import APIRouter

from app.domains.device.api.device_api import router as device_router

api_router = APIRouter()

# Register domain API routers
api_router.include_router(device_router, tags=["Devices"])
