import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.encoders import jsonable_encoder

from app.api.deps import get_device_repository, get_photo_repository
from app.domains.device.exceptions import (
    DeviceError,
    DeviceNotFoundError,
    DeviceValidationError,
    DuplicateDeviceError,
    InvalidCheckinError,
    InvalidCheckoutError,
    StorageError,
)
from app.domains.device.interfaces.device_repository import DeviceRepository
from app.domains.device.interfaces.photo_repository import DevicePhotoRepository
from app.domains.device.models.criteria import DeviceCriteria, DeviceFilter, DeviceSort
from app.domains.device.models.device_model import (
    Computer,
    EnteredDevice,
    FrequentComputer,
    MedicalDevice,
)
from app.domains.device.models.dto import (
    ComputerCheckinRequest,
    DeviceEnteredResponse,
    FrequentComputerRegisterRequest,
    MedicalDeviceCheckinRequest,
)
from app.domains.device.services.computer_service import ComputerService
from app.domains.device.services.device_service import DeviceService
from app.domains.device.services.frequent_computer_service import (
    FrequentComputerService,
)
from app.domains.device.services.medical_device_service import MedicalDeviceService

logger = logging.getLogger(__name__)
router = APIRouter()

_ERROR_STATUS = (
    (DeviceNotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateDeviceError, status.HTTP_409_CONFLICT),
    (InvalidCheckinError, status.HTTP_409_CONFLICT),
    (InvalidCheckoutError, status.HTTP_409_CONFLICT),
    (DeviceValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def _http_error(e: DeviceError) -> HTTPException:
    """將領域錯誤轉換為 HTTPException"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in _ERROR_STATUS:
        if isinstance(e, error_type):
            status_code = code
            break
    detail = {"code": e.code, "message": e.message}
    if isinstance(e, DeviceValidationError) and e.errors:
        detail["errors"] = jsonable_encoder(e.errors)
    return HTTPException(status_code=status_code, detail=detail)


def _unexpected_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"API Error {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"An error occurred while {action}: {str(e)}",
    )


# 依賴注入函數，創建服務實例
async def get_device_service(
    repository: DeviceRepository = Depends(get_device_repository),
) -> DeviceService:
    return DeviceService(device_repository=repository)


async def get_computer_service(
    repository: DeviceRepository = Depends(get_device_repository),
    photo_repository: DevicePhotoRepository = Depends(get_photo_repository),
) -> ComputerService:
    return ComputerService(device_repository=repository, photo_repository=photo_repository)


async def get_medical_device_service(
    repository: DeviceRepository = Depends(get_device_repository),
    photo_repository: DevicePhotoRepository = Depends(get_photo_repository),
) -> MedicalDeviceService:
    return MedicalDeviceService(
        device_repository=repository, photo_repository=photo_repository
    )


async def get_frequent_computer_service(
    repository: DeviceRepository = Depends(get_device_repository),
    photo_repository: DevicePhotoRepository = Depends(get_photo_repository),
) -> FrequentComputerService:
    return FrequentComputerService(
        device_repository=repository, photo_repository=photo_repository
    )


def get_criteria(
    filter_field: Optional[str] = Query(None, description="Exact-match filter column"),
    filter_value: Optional[str] = Query(None, description="Exact-match filter value"),
    sort_field: Optional[str] = Query(None, description="Sort column"),
    ascending: bool = Query(True, description="Sort ascending"),
    limit: Optional[int] = Query(None, ge=0),
    offset: Optional[int] = Query(None, ge=0),
) -> DeviceCriteria:
    """由查詢參數組成 DeviceCriteria"""
    if (filter_field is None) != (filter_value is None):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="filter_field and filter_value must be given together",
        )
    return DeviceCriteria(
        filter_by=(
            DeviceFilter(field=filter_field, value=filter_value)
            if filter_field is not None
            else None
        ),
        sort_by=(
            DeviceSort(field=sort_field, is_ascending=ascending)
            if sort_field is not None
            else None
        ),
        limit=limit,
        offset=offset,
    )


# --- Check-in ---
@router.post(
    "/devices/computers/checkin",
    status_code=status.HTTP_201_CREATED,
    response_model=Computer,
)
async def checkin_computer(
    *,
    computer_service: ComputerService = Depends(get_computer_service),
    device_in: ComputerCheckinRequest,
) -> Computer:
    """
    電腦入場。
    """
    logger.info(f"API: Received computer check-in for owner {device_in.owner.id}")
    try:
        return await computer_service.checkin(device_in)
    except DeviceError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _unexpected_error("checking in the computer", e) from e


@router.post(
    "/devices/medical-devices/checkin",
    status_code=status.HTTP_201_CREATED,
    response_model=MedicalDevice,
)
async def checkin_medical_device(
    *,
    medical_device_service: MedicalDeviceService = Depends(get_medical_device_service),
    device_in: MedicalDeviceCheckinRequest,
) -> MedicalDevice:
    """
    醫療設備入場。
    """
    logger.info(f"API: Received medical device check-in (serial={device_in.serial})")
    try:
        return await medical_device_service.checkin_medical_device(device_in)
    except DeviceError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _unexpected_error("checking in the medical device", e) from e


@router.post(
    "/devices/frequent-computers",
    status_code=status.HTTP_201_CREATED,
    response_model=FrequentComputer,
)
async def register_frequent_computer(
    *,
    frequent_computer_service: FrequentComputerService = Depends(
        get_frequent_computer_service
    ),
    device_in: FrequentComputerRegisterRequest,
) -> FrequentComputer:
    """
    登記常客電腦，返回專屬的入場與出場網址。
    """
    logger.info(f"API: Received frequent computer registration for owner {device_in.owner.id}")
    try:
        return await frequent_computer_service.register(device_in)
    except DeviceError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _unexpected_error("registering the frequent computer", e) from e


@router.post("/frequent/checkin/{device_id}", response_model=FrequentComputer)
async def checkin_frequent_computer(
    device_id: str,
    frequent_computer_service: FrequentComputerService = Depends(
        get_frequent_computer_service
    ),
) -> FrequentComputer:
    """
    常客電腦入場。
    """
    logger.info(f"API: Received frequent computer check-in: {device_id}")
    try:
        return await frequent_computer_service.checkin(device_id)
    except DeviceError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _unexpected_error("checking in the frequent computer", e) from e


# --- Check-out ---
@router.post("/device/checkout/{device_id}", status_code=status.HTTP_204_NO_CONTENT)
async def checkout_device(
    device_id: str,
    device_service: DeviceService = Depends(get_device_service),
) -> None:
    """
    設備出場。
    """
    logger.info(f"API: Received checkout: {device_id}")
    try:
        await device_service.checkout(device_id)
    except DeviceError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _unexpected_error("checking out the device", e) from e


# --- Queries ---
@router.get("/devices/computers", response_model=List[Computer])
async def read_computers(
    device_service: DeviceService = Depends(get_device_service),
    criteria: DeviceCriteria = Depends(get_criteria),
) -> List[Computer]:
    try:
        return await device_service.get_computers(criteria)
    except DeviceError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _unexpected_error("listing computers", e) from e


@router.get("/devices/medical-devices", response_model=List[MedicalDevice])
async def read_medical_devices(
    device_service: DeviceService = Depends(get_device_service),
    criteria: DeviceCriteria = Depends(get_criteria),
) -> List[MedicalDevice]:
    try:
        return await device_service.get_medical_devices(criteria)
    except DeviceError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _unexpected_error("listing medical devices", e) from e


@router.get("/devices/frequent-computers", response_model=List[FrequentComputer])
async def read_frequent_computers(
    device_service: DeviceService = Depends(get_device_service),
    criteria: DeviceCriteria = Depends(get_criteria),
) -> List[FrequentComputer]:
    try:
        return await device_service.get_frequent_computers(criteria)
    except DeviceError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _unexpected_error("listing frequent computers", e) from e


@router.get("/devices/entered", response_model=List[EnteredDevice])
async def read_entered_devices(
    device_service: DeviceService = Depends(get_device_service),
    criteria: DeviceCriteria = Depends(get_criteria),
) -> List[EnteredDevice]:
    """
    目前在場的電腦與醫療設備。
    """
    try:
        return await device_service.get_entered_devices(criteria)
    except DeviceError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _unexpected_error("listing entered devices", e) from e


@router.get("/device/{device_id}/entered", response_model=DeviceEnteredResponse)
async def read_device_entered(
    device_id: str,
    device_service: DeviceService = Depends(get_device_service),
) -> DeviceEnteredResponse:
    try:
        entered = await device_service.is_device_entered(device_id)
    except DeviceError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _unexpected_error("checking device presence", e) from e
    return DeviceEnteredResponse(device_id=device_id, entered=entered)
