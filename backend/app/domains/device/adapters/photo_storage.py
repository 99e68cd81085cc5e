import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional

from app.core.config import PHOTO_DIR, PHOTO_URL_PREFIX
from app.domains.device.exceptions import DeviceValidationError
from app.domains.device.interfaces.photo_repository import DevicePhotoRepository
from app.domains.device.models.device_model import DeviceId

logger = logging.getLogger(__name__)

# 以檔頭判斷照片格式
_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", ".png"),
    (b"\xff\xd8\xff", ".jpg"),
    (b"GIF87a", ".gif"),
    (b"GIF89a", ".gif"),
)


def guess_photo_extension(photo: bytes) -> str:
    for signature, extension in _SIGNATURES:
        if photo.startswith(signature):
            return extension
    if photo[:4] == b"RIFF" and photo[8:12] == b"WEBP":
        return ".webp"
    return ".bin"


def _check_photo(photo: bytes, device_id: DeviceId) -> None:
    if not photo:
        raise DeviceValidationError(
            f"Photo for device '{device_id}' is empty",
            errors=[{"loc": ["photo"], "msg": "empty photo"}],
        )


class LocalDevicePhotoRepository(DevicePhotoRepository):
    """將設備照片寫入本機靜態目錄，透過 /static 掛載對外提供"""

    def __init__(
        self, photo_dir: Optional[Path] = None, url_prefix: Optional[str] = None
    ):
        self.photo_dir = Path(photo_dir or PHOTO_DIR)
        self.url_prefix = (url_prefix or PHOTO_URL_PREFIX).rstrip("/")

    async def save_photo(self, photo: bytes, device_id: DeviceId) -> str:
        _check_photo(photo, device_id)
        filename = f"{device_id}{guess_photo_extension(photo)}"
        path = self.photo_dir / filename
        self.photo_dir.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(path.write_bytes, photo)
        logger.info(f"Saved photo for device {device_id} to {path} ({len(photo)} bytes)")
        return f"{self.url_prefix}/{filename}"


class InMemoryDevicePhotoRepository(DevicePhotoRepository):
    """照片存儲的記憶體實現，供測試使用"""

    def __init__(self, url_prefix: str = "memory://photos"):
        self.url_prefix = url_prefix.rstrip("/")
        self.photos: Dict[DeviceId, bytes] = {}

    async def save_photo(self, photo: bytes, device_id: DeviceId) -> str:
        _check_photo(photo, device_id)
        self.photos[device_id] = photo
        return f"{self.url_prefix}/{device_id}{guess_photo_extension(photo)}"
