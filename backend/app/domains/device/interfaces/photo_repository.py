from abc import ABC, abstractmethod

from app.domains.device.models.device_model import DeviceId


class DevicePhotoRepository(ABC):
    """設備照片存儲接口"""

    @abstractmethod
    async def save_photo(self, photo: bytes, device_id: DeviceId) -> str:
        """保存照片並返回可公開存取的網址"""
        pass
