from datetime import datetime
from typing import Optional, Type, Union

from sqlalchemy import DateTime, String
from sqlmodel import Field, SQLModel


# --- SQLModel Definitions ---
class DeviceRowBase(SQLModel):
    """三個設備資料表共同的欄位"""

    id: str = Field(primary_key=True, sa_type=String(64))
    brand: str = Field(...)
    model: str = Field(...)
    owner_id: str = Field(..., index=True)
    owner_name: str = Field(...)
    photo_url: str = Field(...)
    updated_at: datetime = Field(..., sa_type=DateTime(timezone=True))
    checkin_at: Optional[datetime] = Field(
        default=None, sa_type=DateTime(timezone=True)
    )
    checkout_at: Optional[datetime] = Field(
        default=None, sa_type=DateTime(timezone=True)
    )


class ComputerRow(DeviceRowBase, table=True):
    """電腦資料表"""

    __tablename__ = "computers"


class MedicalDeviceRow(DeviceRowBase, table=True):
    """醫療設備資料表"""

    __tablename__ = "medical_devices"

    serial: str = Field(..., index=True)


class FrequentComputerRow(DeviceRowBase, table=True):
    """常客電腦資料表"""

    __tablename__ = "frequent_computers"

    checkin_url: str = Field(...)
    checkout_url: str = Field(...)


DeviceRow = Union[ComputerRow, MedicalDeviceRow, FrequentComputerRow]
DeviceRowModel = Type[DeviceRow]

# checkout_device 依序嘗試的資料表
CHECKOUT_ORDER = (ComputerRow, MedicalDeviceRow, FrequentComputerRow)
