import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from app.domains.common.utils.datetime_utils import ensure_utc, utc_now
from app.domains.device.adapters.mappers import (
    computer_to_row,
    frequent_computer_to_row,
    medical_device_to_row,
    row_to_computer,
    row_to_entered_computer,
    row_to_entered_medical_device,
    row_to_frequent_computer,
    row_to_medical_device,
)
from app.domains.device.adapters.query import apply_criteria, resolve_criteria
from app.domains.device.exceptions import (
    DeviceNotFoundError,
    DuplicateDeviceError,
    InvalidCheckinError,
    InvalidCheckoutError,
)
from app.domains.device.interfaces.device_repository import DeviceRepository
from app.domains.device.models.criteria import DeviceCriteria
from app.domains.device.models.device_model import (
    Computer,
    DeviceId,
    EnteredDevice,
    FrequentComputer,
    MedicalDevice,
    is_device_entered,
)
from app.domains.device.models.row_model import (
    CHECKOUT_ORDER,
    ComputerRow,
    DeviceRow,
    DeviceRowModel,
    FrequentComputerRow,
    MedicalDeviceRow,
)

logger = logging.getLogger(__name__)


class InMemoryDeviceRepository(DeviceRepository):
    """設備存儲庫的記憶體實現，僅供單一行程測試使用（無同步機制）

    以與資料表相同的資料列型別保存資料，查詢規則與 SQLModel 實現一致。
    """

    def __init__(self):
        self._tables: Dict[DeviceRowModel, Dict[DeviceId, DeviceRow]] = {
            row_model: {} for row_model in CHECKOUT_ORDER
        }

    # --- Frequent Computers ---
    async def register_frequent_computer(
        self, computer: FrequentComputer
    ) -> FrequentComputer:
        logger.info(f"Registering frequent computer: {computer.id}")
        self._insert(frequent_computer_to_row(computer))
        return computer

    async def get_frequent_computers(
        self, criteria: DeviceCriteria
    ) -> List[FrequentComputer]:
        rows = self._select(FrequentComputerRow, criteria)
        return [row_to_frequent_computer(row) for row in rows]

    async def checkin_frequent_computer(
        self, device_id: DeviceId, at: datetime
    ) -> FrequentComputer:
        row = self._tables[FrequentComputerRow].get(device_id)
        if row is None:
            logger.warning(f"Frequent computer {device_id} not found for check-in.")
            raise DeviceNotFoundError(device_id)
        at = ensure_utc(at)
        if not self._can_checkin(row, at):
            logger.warning(f"Rejected check-in of frequent computer {device_id}.")
            raise InvalidCheckinError(
                device_id, "device is already entered or check-in precedes checkout"
            )
        row.checkin_at = at
        row.updated_at = at
        logger.info(f"Checked in frequent computer {device_id} at {at.isoformat()}")
        return row_to_frequent_computer(row)

    async def is_frequent_computer_registered(self, device_id: DeviceId) -> bool:
        return device_id in self._tables[FrequentComputerRow]

    # --- Computers ---
    async def checkin_computer(self, computer: Computer) -> Computer:
        checked_in = computer.model_copy(
            update={"checkin_at": utc_now(), "checkout_at": None}
        )
        logger.info(f"Checking in computer: {checked_in.id}")
        self._insert(computer_to_row(checked_in))
        return checked_in

    async def get_computers(self, criteria: DeviceCriteria) -> List[Computer]:
        rows = self._select(ComputerRow, criteria)
        return [row_to_computer(row) for row in rows]

    # --- Medical Devices ---
    async def checkin_medical_device(self, device: MedicalDevice) -> MedicalDevice:
        checked_in = device.model_copy(
            update={"checkin_at": utc_now(), "checkout_at": None}
        )
        logger.info(
            f"Checking in medical device: {checked_in.id} (serial={checked_in.serial})"
        )
        self._insert(medical_device_to_row(checked_in))
        return checked_in

    async def get_medical_devices(
        self, criteria: DeviceCriteria
    ) -> List[MedicalDevice]:
        rows = self._select(MedicalDeviceRow, criteria)
        return [row_to_medical_device(row) for row in rows]

    # --- All Devices ---
    async def get_entered_devices(
        self, criteria: DeviceCriteria
    ) -> List[EnteredDevice]:
        for row_model in (ComputerRow, MedicalDeviceRow):
            resolve_criteria(row_model, criteria)
        computer_rows, medical_rows = await asyncio.gather(
            self._select_async(ComputerRow, criteria),
            self._select_async(MedicalDeviceRow, criteria),
        )
        entered: List[EnteredDevice] = [
            row_to_entered_computer(row) for row in computer_rows
        ]
        entered.extend(row_to_entered_medical_device(row) for row in medical_rows)
        return entered

    async def checkout_device(self, device_id: DeviceId, at: datetime) -> None:
        at = ensure_utc(at)
        updated = 0
        for row_model in CHECKOUT_ORDER:
            row = self._tables[row_model].get(device_id)
            if row is None or not self._can_checkout(row, at):
                continue
            row.checkout_at = at
            row.updated_at = at
            updated += 1

        if updated:
            logger.info(f"Checked out device {device_id} at {at.isoformat()}")
            return
        if any(device_id in table for table in self._tables.values()):
            logger.warning(f"Rejected checkout of device {device_id}.")
            raise InvalidCheckoutError(
                device_id, "device is not entered or checkout precedes check-in"
            )
        logger.warning(f"Device {device_id} not found for checkout.")
        raise DeviceNotFoundError(device_id)

    async def is_device_entered(self, device_id: DeviceId) -> bool:
        for row_model in (ComputerRow, MedicalDeviceRow):
            row = self._tables[row_model].get(device_id)
            if row is not None and is_device_entered(row.checkin_at, row.checkout_at):
                return True
        return False

    # --- Helpers ---
    def _insert(self, row: DeviceRow) -> None:
        table = self._tables[type(row)]
        if row.id in table:
            logger.warning(f"Duplicate id {row.id} in {row.__tablename__}")
            raise DuplicateDeviceError(row.id)
        table[row.id] = row

    def _select(
        self,
        row_model: DeviceRowModel,
        criteria: Optional[DeviceCriteria],
        entered_only: bool = False,
    ) -> List[DeviceRow]:
        resolved = resolve_criteria(row_model, criteria)
        rows = self._tables[row_model].values()
        if entered_only:
            rows = [
                row for row in rows if is_device_entered(row.checkin_at, row.checkout_at)
            ]
        return apply_criteria(rows, resolved)

    async def _select_async(
        self, row_model: DeviceRowModel, criteria: Optional[DeviceCriteria]
    ) -> List[DeviceRow]:
        return self._select(row_model, criteria, entered_only=True)

    @staticmethod
    def _can_checkin(row: DeviceRow, at: datetime) -> bool:
        if is_device_entered(row.checkin_at, row.checkout_at):
            return False
        return row.checkout_at is None or row.checkout_at < at

    @staticmethod
    def _can_checkout(row: DeviceRow, at: datetime) -> bool:
        return is_device_entered(row.checkin_at, row.checkout_at) and row.checkin_at <= at
