import logging
from typing import List, Optional

from app.domains.common.utils.datetime_utils import utc_now
from app.domains.device.interfaces.device_repository import DeviceRepository
from app.domains.device.models.criteria import DeviceCriteria
from app.domains.device.models.device_model import (
    Computer,
    DeviceId,
    EnteredDevice,
    FrequentComputer,
    MedicalDevice,
)

logger = logging.getLogger(__name__)


class DeviceService:
    """設備服務層，處理出場與在場狀態查詢"""

    def __init__(self, device_repository: DeviceRepository):
        self.device_repository = device_repository

    async def checkout(self, device_id: DeviceId) -> None:
        """以目前時間讓設備出場"""
        logger.info(f"Checking out device {device_id}")
        await self.device_repository.checkout_device(device_id, utc_now())

    async def is_device_entered(self, device_id: DeviceId) -> bool:
        return await self.device_repository.is_device_entered(device_id)

    async def get_entered_devices(
        self, criteria: Optional[DeviceCriteria] = None
    ) -> List[EnteredDevice]:
        return await self.device_repository.get_entered_devices(
            criteria or DeviceCriteria()
        )

    async def get_computers(
        self, criteria: Optional[DeviceCriteria] = None
    ) -> List[Computer]:
        return await self.device_repository.get_computers(criteria or DeviceCriteria())

    async def get_medical_devices(
        self, criteria: Optional[DeviceCriteria] = None
    ) -> List[MedicalDevice]:
        return await self.device_repository.get_medical_devices(
            criteria or DeviceCriteria()
        )

    async def get_frequent_computers(
        self, criteria: Optional[DeviceCriteria] = None
    ) -> List[FrequentComputer]:
        return await self.device_repository.get_frequent_computers(
            criteria or DeviceCriteria()
        )
