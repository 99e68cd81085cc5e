from functools import lru_cache

from app.core.config import DEVICE_REPOSITORY_BACKEND
from app.domains.device.adapters.memory_device_repository import InMemoryDeviceRepository
from app.domains.device.adapters.photo_storage import LocalDevicePhotoRepository
from app.domains.device.adapters.sqlmodel_device_repository import (
    SQLModelDeviceRepository,
)
from app.domains.device.interfaces.device_repository import DeviceRepository
from app.domains.device.interfaces.photo_repository import DevicePhotoRepository


@lru_cache(maxsize=None)
def get_device_repository() -> DeviceRepository:
    """FastAPI dependency returning the process-wide device repository."""
    if DEVICE_REPOSITORY_BACKEND == "memory":
        return InMemoryDeviceRepository()
    return SQLModelDeviceRepository()


@lru_cache(maxsize=None)
def get_photo_repository() -> DevicePhotoRepository:
    """FastAPI dependency returning the photo store."""
    return LocalDevicePhotoRepository()
