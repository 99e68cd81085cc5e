import logging
from typing import Any, Dict, Optional, Union

from app.domains.common.utils.datetime_utils import utc_now
from app.domains.device.exceptions import DeviceNotFoundError
from app.domains.device.interfaces.device_repository import DeviceRepository
from app.domains.device.interfaces.photo_repository import DevicePhotoRepository
from app.domains.device.models.device_model import Computer, DeviceId, FrequentComputer
from app.domains.device.models.dto import FrequentComputerRegisterRequest
from app.domains.device.services.helper import (
    generate_device_id,
    get_frequent_checkin_url,
    get_frequent_checkout_url,
    validate_request,
)

logger = logging.getLogger(__name__)


class FrequentComputerService:
    """常客電腦服務：登記一次，之後透過專屬網址反覆入場與出場"""

    def __init__(
        self,
        device_repository: DeviceRepository,
        photo_repository: DevicePhotoRepository,
        base_url: Optional[str] = None,
    ):
        self.device_repository = device_repository
        self.photo_repository = photo_repository
        self.base_url = base_url

    async def register(
        self, request: Union[FrequentComputerRegisterRequest, Dict[str, Any]]
    ) -> FrequentComputer:
        """登記常客電腦並產生入場與出場網址"""
        register_request = validate_request(FrequentComputerRegisterRequest, request)

        device_id = generate_device_id()
        photo_url = await self.photo_repository.save_photo(
            register_request.photo, device_id
        )

        computer = FrequentComputer(
            device=Computer(
                id=device_id,
                brand=register_request.brand,
                model=register_request.model,
                owner=register_request.owner,
                photo_url=photo_url,
                updated_at=utc_now(),
            ),
            checkin_url=get_frequent_checkin_url(device_id, self.base_url),
            checkout_url=get_frequent_checkout_url(device_id, self.base_url),
        )
        logger.info(f"Registering frequent computer {device_id}")
        try:
            return await self.device_repository.register_frequent_computer(computer)
        except Exception:
            logger.error(
                f"Registration of frequent computer {device_id} failed, "
                f"photo {photo_url} is orphaned"
            )
            raise

    async def checkin(self, device_id: DeviceId) -> FrequentComputer:
        """常客電腦入場，未登記時拋出 DeviceNotFoundError"""
        if not await self.device_repository.is_frequent_computer_registered(device_id):
            logger.warning(f"Frequent computer {device_id} is not registered.")
            raise DeviceNotFoundError(device_id)
        return await self.device_repository.checkin_frequent_computer(
            device_id, utc_now()
        )
