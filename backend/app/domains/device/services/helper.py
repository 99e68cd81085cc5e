import uuid
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.core.config import API_BASE_URL
from app.domains.device.exceptions import DeviceValidationError
from app.domains.device.models.device_model import DeviceId

RequestT = TypeVar("RequestT", bound=BaseModel)

FREQUENT_CHECKIN_PATH = "/frequent/checkin/{device_id}"
DEVICE_CHECKOUT_PATH = "/device/checkout/{device_id}"


def generate_device_id() -> DeviceId:
    """產生全域唯一的設備識別符（UUID4）"""
    return str(uuid.uuid4())


def get_frequent_checkin_url(device_id: DeviceId, base_url: Optional[str] = None) -> str:
    """常客電腦的入場網址"""
    base = (base_url or API_BASE_URL).rstrip("/")
    return base + FREQUENT_CHECKIN_PATH.format(device_id=device_id)


def get_frequent_checkout_url(device_id: DeviceId, base_url: Optional[str] = None) -> str:
    """常客電腦的出場網址，與一般設備共用出場端點"""
    base = (base_url or API_BASE_URL).rstrip("/")
    return base + DEVICE_CHECKOUT_PATH.format(device_id=device_id)


def validate_request(schema: Type[RequestT], request: Any) -> RequestT:
    """以 pydantic 模型驗證請求

    Raises:
        DeviceValidationError: 請求格式錯誤
    """
    if isinstance(request, schema):
        return request
    try:
        return schema.model_validate(request)
    except ValidationError as e:
        raise DeviceValidationError(
            f"Invalid {schema.__name__}",
            errors=e.errors(include_url=False, include_context=False),
        ) from e
