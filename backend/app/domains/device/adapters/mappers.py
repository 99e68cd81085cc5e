"""
資料列與領域模型之間的轉換

每個資料表各有一組雙向轉換函數，儲存庫邊界之外只出現領域模型。
"""

from typing import Any, Dict

from app.domains.common.utils.datetime_utils import ensure_utc
from app.domains.device.models.device_model import (
    Computer,
    EnteredComputer,
    EnteredMedicalDevice,
    FrequentComputer,
    MedicalDevice,
    Owner,
)
from app.domains.device.models.row_model import (
    ComputerRow,
    DeviceRowBase,
    FrequentComputerRow,
    MedicalDeviceRow,
)


def _computer_columns(computer: Computer) -> Dict[str, Any]:
    return {
        "id": computer.id,
        "brand": computer.brand,
        "model": computer.model,
        "owner_id": computer.owner.id,
        "owner_name": computer.owner.name,
        "photo_url": str(computer.photo_url),
        "updated_at": ensure_utc(computer.updated_at),
        "checkin_at": ensure_utc(computer.checkin_at),
        "checkout_at": ensure_utc(computer.checkout_at),
    }


def _computer_fields(row: DeviceRowBase) -> Dict[str, Any]:
    return {
        "id": row.id,
        "brand": row.brand,
        "model": row.model,
        "owner": Owner(id=row.owner_id, name=row.owner_name),
        "photo_url": row.photo_url,
        "updated_at": ensure_utc(row.updated_at),
        "checkin_at": ensure_utc(row.checkin_at),
        "checkout_at": ensure_utc(row.checkout_at),
    }


# --- Computers ---
def computer_to_row(computer: Computer) -> ComputerRow:
    return ComputerRow(**_computer_columns(computer))


def row_to_computer(row: ComputerRow) -> Computer:
    return Computer(**_computer_fields(row))


def row_to_entered_computer(row: ComputerRow) -> EnteredComputer:
    return EnteredComputer(**_computer_fields(row))


# --- Medical Devices ---
def medical_device_to_row(device: MedicalDevice) -> MedicalDeviceRow:
    return MedicalDeviceRow(**_computer_columns(device), serial=device.serial)


def row_to_medical_device(row: MedicalDeviceRow) -> MedicalDevice:
    return MedicalDevice(**_computer_fields(row), serial=row.serial)


def row_to_entered_medical_device(row: MedicalDeviceRow) -> EnteredMedicalDevice:
    return EnteredMedicalDevice(**_computer_fields(row), serial=row.serial)


# --- Frequent Computers ---
def frequent_computer_to_row(computer: FrequentComputer) -> FrequentComputerRow:
    return FrequentComputerRow(
        **_computer_columns(computer.device),
        checkin_url=str(computer.checkin_url),
        checkout_url=str(computer.checkout_url),
    )


def row_to_frequent_computer(row: FrequentComputerRow) -> FrequentComputer:
    return FrequentComputer(
        device=Computer(**_computer_fields(row)),
        checkin_url=row.checkin_url,
        checkout_url=row.checkout_url,
    )
