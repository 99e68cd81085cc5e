import logging
from typing import Any, Dict, Union

from app.domains.common.utils.datetime_utils import utc_now
from app.domains.device.interfaces.device_repository import DeviceRepository
from app.domains.device.interfaces.photo_repository import DevicePhotoRepository
from app.domains.device.models.device_model import MedicalDevice
from app.domains.device.models.dto import MedicalDeviceCheckinRequest
from app.domains.device.services.helper import generate_device_id, validate_request

logger = logging.getLogger(__name__)


class MedicalDeviceService:
    """醫療設備服務層，負責入場流程的編排"""

    def __init__(
        self,
        device_repository: DeviceRepository,
        photo_repository: DevicePhotoRepository,
    ):
        self.device_repository = device_repository
        self.photo_repository = photo_repository

    async def checkin_medical_device(
        self, request: Union[MedicalDeviceCheckinRequest, Dict[str, Any]]
    ) -> MedicalDevice:
        """醫療設備入場

        驗證請求、產生識別符、保存照片，再交由儲存庫寫入。
        驗證失敗時拋出 DeviceValidationError，不會觸及任何儲存。
        """
        checkin_request = validate_request(MedicalDeviceCheckinRequest, request)

        device_id = generate_device_id()
        photo_url = await self.photo_repository.save_photo(
            checkin_request.photo, device_id
        )

        now = utc_now()
        device = MedicalDevice(
            id=device_id,
            brand=checkin_request.brand,
            model=checkin_request.model,
            owner=checkin_request.owner,
            serial=checkin_request.serial,
            photo_url=photo_url,
            updated_at=now,
            checkin_at=now,
        )
        logger.info(f"Medical device {device_id} (serial={device.serial}) checking in")
        try:
            return await self.device_repository.checkin_medical_device(device)
        except Exception:
            logger.error(
                f"Check-in of medical device {device_id} failed, "
                f"photo {photo_url} is orphaned"
            )
            raise
