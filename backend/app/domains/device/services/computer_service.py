import logging
from typing import Any, Dict, Union

from app.domains.common.utils.datetime_utils import utc_now
from app.domains.device.interfaces.device_repository import DeviceRepository
from app.domains.device.interfaces.photo_repository import DevicePhotoRepository
from app.domains.device.models.device_model import Computer
from app.domains.device.models.dto import ComputerCheckinRequest
from app.domains.device.services.helper import generate_device_id, validate_request

logger = logging.getLogger(__name__)


class ComputerService:
    """電腦入場服務"""

    def __init__(
        self,
        device_repository: DeviceRepository,
        photo_repository: DevicePhotoRepository,
    ):
        self.device_repository = device_repository
        self.photo_repository = photo_repository

    async def checkin(
        self, request: Union[ComputerCheckinRequest, Dict[str, Any]]
    ) -> Computer:
        checkin_request = validate_request(ComputerCheckinRequest, request)

        device_id = generate_device_id()
        photo_url = await self.photo_repository.save_photo(
            checkin_request.photo, device_id
        )

        now = utc_now()
        computer = Computer(
            id=device_id,
            brand=checkin_request.brand,
            model=checkin_request.model,
            owner=checkin_request.owner,
            photo_url=photo_url,
            updated_at=now,
            checkin_at=now,
        )
        logger.info(f"Computer {device_id} checking in")
        try:
            return await self.device_repository.checkin_computer(computer)
        except Exception:
            logger.error(
                f"Check-in of computer {device_id} failed, photo {photo_url} is orphaned"
            )
            raise
