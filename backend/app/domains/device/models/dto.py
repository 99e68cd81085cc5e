from pydantic import BaseModel, Base64Bytes, Field, ConfigDict

from .device_model import Owner


class DeviceCheckinRequest(BaseModel):
    """設備入場請求的共同欄位"""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    brand: str = Field(..., min_length=1, description="品牌")
    model: str = Field(..., min_length=1, description="型號")
    owner: Owner = Field(..., description="負責人")
    photo: Base64Bytes = Field(..., description="Base64 編碼的照片")


class ComputerCheckinRequest(DeviceCheckinRequest):
    """電腦入場請求"""

    pass


class MedicalDeviceCheckinRequest(DeviceCheckinRequest):
    """醫療設備入場請求"""

    serial: str = Field(..., min_length=1, description="製造商序號")


class FrequentComputerRegisterRequest(DeviceCheckinRequest):
    """常客電腦登記請求"""

    pass


class DeviceEnteredResponse(BaseModel):
    """設備在場狀態"""

    device_id: str
    entered: bool
