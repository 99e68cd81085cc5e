from datetime import datetime
from enum import Enum as PyEnum
from typing import Annotated, Literal, Optional, Union

from pydantic import AnyUrl, Field

from app.domains.common.models.base_model import Entity, ValueObject, DomainBaseModel

DeviceId = str


# --- Enum Definitions ---
class DeviceKind(str, PyEnum):
    COMPUTER = "computer"
    MEDICAL_DEVICE = "medical-device"
    FREQUENT_COMPUTER = "frequent-computer"


def is_device_entered(
    checkin_at: Optional[datetime], checkout_at: Optional[datetime]
) -> bool:
    """判斷設備目前是否在場內

    有入場時間，且沒有出場時間或出場時間早於最近一次入場時間，即視為在場內。
    """
    if checkin_at is None:
        return False
    return checkout_at is None or checkout_at < checkin_at


# --- Domain Models ---
class Owner(ValueObject):
    """設備負責人"""

    id: str = Field(..., description="負責人識別符")
    name: str = Field(..., description="負責人姓名")


class Computer(Entity):
    """電腦設備"""

    brand: str = Field(..., description="品牌")
    model: str = Field(..., description="型號")
    owner: Owner = Field(..., description="負責人")
    photo_url: AnyUrl = Field(..., description="照片網址")
    updated_at: datetime = Field(..., description="最後更新時間")
    checkin_at: Optional[datetime] = Field(None, description="入場時間")
    checkout_at: Optional[datetime] = Field(None, description="出場時間")

    @property
    def is_entered(self) -> bool:
        return is_device_entered(self.checkin_at, self.checkout_at)


class MedicalDevice(Computer):
    """醫療設備，額外帶有製造商序號"""

    serial: str = Field(..., description="製造商序號")


class FrequentComputer(DomainBaseModel):
    """常客電腦：預先登記，透過專屬網址快速入場與出場"""

    device: Computer = Field(..., description="被包裝的電腦，記錄實際的在場狀態")
    checkin_url: AnyUrl = Field(..., description="入場網址")
    checkout_url: AnyUrl = Field(..., description="出場網址")

    @property
    def id(self) -> DeviceId:
        return self.device.id


# --- Entered Device Projection ---
class EnteredComputer(Computer):
    type: Literal[DeviceKind.COMPUTER] = DeviceKind.COMPUTER


class EnteredMedicalDevice(MedicalDevice):
    type: Literal[DeviceKind.MEDICAL_DEVICE] = DeviceKind.MEDICAL_DEVICE


class EnteredFrequentComputer(FrequentComputer):
    type: Literal[DeviceKind.FREQUENT_COMPUTER] = DeviceKind.FREQUENT_COMPUTER


# 目前在場設備的唯讀投影，以 type 欄位區分來源類別
EnteredDevice = Annotated[
    Union[EnteredComputer, EnteredMedicalDevice, EnteredFrequentComputer],
    Field(discriminator="type"),
]
