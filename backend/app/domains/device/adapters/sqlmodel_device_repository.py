import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, not_, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select

from app.db.base import async_session_maker
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
from app.domains.device.adapters.query import resolve_criteria
from app.domains.device.exceptions import (
    DeviceNotFoundError,
    DuplicateDeviceError,
    InvalidCheckinError,
    InvalidCheckoutError,
    StorageError,
)
from app.domains.device.interfaces.device_repository import DeviceRepository
from app.domains.device.models.criteria import DeviceCriteria
from app.domains.device.models.device_model import (
    Computer,
    DeviceId,
    EnteredDevice,
    FrequentComputer,
    MedicalDevice,
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


def _entered_clause(row_model: DeviceRowModel):
    return and_(
        row_model.checkin_at.is_not(None),
        or_(
            row_model.checkout_at.is_(None),
            row_model.checkout_at < row_model.checkin_at,
        ),
    )


class SQLModelDeviceRepository(DeviceRepository):
    """設備存儲庫的 SQLModel 實現

    每個操作各自開啟一個 session，因此 get_entered_devices 可以並行查詢。
    """

    def __init__(self, session_factory=async_session_maker):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Frequent Computers
    # ------------------------------------------------------------------

    async def register_frequent_computer(
        self, computer: FrequentComputer
    ) -> FrequentComputer:
        """登記一台常客電腦"""
        logger.info(f"Registering frequent computer: {computer.id}")
        await self._insert(frequent_computer_to_row(computer))
        return computer

    async def get_frequent_computers(
        self, criteria: DeviceCriteria
    ) -> List[FrequentComputer]:
        """依條件查詢常客電腦"""
        rows = await self._select(FrequentComputerRow, criteria)
        return [row_to_frequent_computer(row) for row in rows]

    async def checkin_frequent_computer(
        self, device_id: DeviceId, at: datetime
    ) -> FrequentComputer:
        """常客電腦入場

        只有不在場內、且入場時間晚於上次出場時間的常客電腦才能入場。

        Raises:
            DeviceNotFoundError: 常客電腦未登記
            InvalidCheckinError: 已在場內或入場時間不晚於上次出場時間
        """
        at = ensure_utc(at)
        logger.info(f"Checking in frequent computer {device_id} at {at.isoformat()}")
        computer: Optional[FrequentComputer] = None
        async with self._session_factory() as session:
            try:
                statement = (
                    update(FrequentComputerRow)
                    .where(
                        FrequentComputerRow.id == device_id,
                        not_(_entered_clause(FrequentComputerRow)),
                        or_(
                            FrequentComputerRow.checkout_at.is_(None),
                            FrequentComputerRow.checkout_at < at,
                        ),
                    )
                    .values(checkin_at=at, updated_at=at)
                    .execution_options(synchronize_session=False)
                )
                result = await session.execute(statement)
                if result.rowcount:
                    results = await session.execute(
                        select(FrequentComputerRow).where(
                            FrequentComputerRow.id == device_id
                        )
                    )
                    computer = row_to_frequent_computer(results.scalar_one())
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(
                    f"Error checking in frequent computer {device_id}: {e}", exc_info=True
                )
                raise StorageError(
                    f"Failed to check in frequent computer '{device_id}'"
                ) from e

        if computer is not None:
            return computer
        if await self._exists(FrequentComputerRow, device_id):
            logger.warning(f"Rejected check-in of frequent computer {device_id}.")
            raise InvalidCheckinError(
                device_id, "device is already entered or check-in precedes checkout"
            )
        logger.warning(f"Frequent computer {device_id} not found for check-in.")
        raise DeviceNotFoundError(device_id)

    async def is_frequent_computer_registered(self, device_id: DeviceId) -> bool:
        """檢查常客電腦是否已登記"""
        return await self._exists(FrequentComputerRow, device_id)

    # ------------------------------------------------------------------
    # Computers
    # ------------------------------------------------------------------

    async def checkin_computer(self, computer: Computer) -> Computer:
        """電腦入場，以目前時間覆寫 checkin_at"""
        checked_in = computer.model_copy(
            update={"checkin_at": utc_now(), "checkout_at": None}
        )
        logger.info(f"Checking in computer: {checked_in.id}")
        await self._insert(computer_to_row(checked_in))
        return checked_in

    async def get_computers(self, criteria: DeviceCriteria) -> List[Computer]:
        """依條件查詢電腦"""
        rows = await self._select(ComputerRow, criteria)
        return [row_to_computer(row) for row in rows]

    # ------------------------------------------------------------------
    # Medical Devices
    # ------------------------------------------------------------------

    async def checkin_medical_device(self, device: MedicalDevice) -> MedicalDevice:
        """醫療設備入場，以目前時間覆寫 checkin_at"""
        checked_in = device.model_copy(
            update={"checkin_at": utc_now(), "checkout_at": None}
        )
        logger.info(
            f"Checking in medical device: {checked_in.id} (serial={checked_in.serial})"
        )
        await self._insert(medical_device_to_row(checked_in))
        return checked_in

    async def get_medical_devices(
        self, criteria: DeviceCriteria
    ) -> List[MedicalDevice]:
        """依條件查詢醫療設備"""
        rows = await self._select(MedicalDeviceRow, criteria)
        return [row_to_medical_device(row) for row in rows]

    # ------------------------------------------------------------------
    # All Devices
    # ------------------------------------------------------------------

    async def get_entered_devices(
        self, criteria: DeviceCriteria
    ) -> List[EnteredDevice]:
        """並行查詢在場的電腦與醫療設備，任一失敗則整體失敗"""
        # 先驗證兩個資料表的條件，避免其中一邊已送出查詢
        for row_model in (ComputerRow, MedicalDeviceRow):
            resolve_criteria(row_model, criteria)
        computer_rows, medical_rows = await asyncio.gather(
            self._select(ComputerRow, criteria, entered_only=True),
            self._select(MedicalDeviceRow, criteria, entered_only=True),
        )
        entered: List[EnteredDevice] = [
            row_to_entered_computer(row) for row in computer_rows
        ]
        entered.extend(row_to_entered_medical_device(row) for row in medical_rows)
        return entered

    async def checkout_device(self, device_id: DeviceId, at: datetime) -> None:
        """設備出場

        電腦與醫療設備在同一個交易中更新，失敗即中止；
        常客電腦另外更新，失敗只記錄警告。
        """
        at = ensure_utc(at)
        primary_tables, frequent_table = CHECKOUT_ORDER[:-1], CHECKOUT_ORDER[-1]
        updated = 0

        async with self._session_factory() as session:
            try:
                for row_model in primary_tables:
                    updated += await self._stamp_checkout(session, row_model, device_id, at)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error checking out device {device_id}: {e}", exc_info=True)
                raise StorageError(f"Failed to check out device '{device_id}'") from e

        frequent_error: Optional[SQLAlchemyError] = None
        try:
            async with self._session_factory() as session:
                updated += await self._stamp_checkout(
                    session, frequent_table, device_id, at
                )
                await session.commit()
        except SQLAlchemyError as e:
            frequent_error = e
            logger.warning(
                f"Best-effort checkout of frequent computer {device_id} failed: {e}",
                exc_info=True,
            )

        if updated:
            logger.info(f"Checked out device {device_id} at {at.isoformat()}")
            return
        if frequent_error is not None:
            raise StorageError(
                f"Failed to check out frequent computer '{device_id}'"
            ) from frequent_error

        for row_model in CHECKOUT_ORDER:
            if await self._exists(row_model, device_id):
                logger.warning(f"Rejected checkout of device {device_id}.")
                raise InvalidCheckoutError(
                    device_id, "device is not entered or checkout precedes check-in"
                )
        logger.warning(f"Device {device_id} not found for checkout.")
        raise DeviceNotFoundError(device_id)

    async def is_device_entered(self, device_id: DeviceId) -> bool:
        """依序檢查電腦與醫療設備，不檢查常客電腦"""
        for row_model in (ComputerRow, MedicalDeviceRow):
            if await self._exists(row_model, device_id, entered_only=True):
                return True
        return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _insert(self, row: DeviceRow) -> None:
        table, row_id = row.__tablename__, row.id
        async with self._session_factory() as session:
            try:
                session.add(row)
                await session.commit()
                logger.debug(f"Inserted {table} row {row_id}")
            except IntegrityError as e:
                await session.rollback()
                logger.warning(f"Duplicate id {row_id} in {table}: {e}")
                raise DuplicateDeviceError(row_id) from e
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error inserting into {table}: {e}", exc_info=True)
                raise StorageError(f"Failed to insert into '{table}'") from e

    async def _select(
        self,
        row_model: DeviceRowModel,
        criteria: Optional[DeviceCriteria],
        entered_only: bool = False,
    ) -> List[DeviceRow]:
        resolved = resolve_criteria(row_model, criteria)
        logger.debug(f"Querying {row_model.__tablename__}: {resolved}")

        statement = select(row_model)
        if entered_only:
            statement = statement.where(_entered_clause(row_model))
        if resolved.filter_field is not None:
            column = getattr(row_model, resolved.filter_field)
            statement = statement.where(column == resolved.filter_value)
        if resolved.sort_field is not None:
            column = getattr(row_model, resolved.sort_field)
            statement = statement.order_by(
                column.asc().nulls_last()
                if resolved.is_ascending
                else column.desc().nulls_first()
            )
        if resolved.offset:
            statement = statement.offset(resolved.offset)
        if resolved.limit is not None:
            statement = statement.limit(resolved.limit)

        async with self._session_factory() as session:
            try:
                results = await session.execute(statement)
                return list(results.scalars().all())
            except SQLAlchemyError as e:
                logger.error(
                    f"Error querying {row_model.__tablename__}: {e}", exc_info=True
                )
                raise StorageError(
                    f"Failed to query '{row_model.__tablename__}'"
                ) from e

    async def _exists(
        self, row_model: DeviceRowModel, device_id: DeviceId, entered_only: bool = False
    ) -> bool:
        statement = select(row_model.id).where(row_model.id == device_id)
        if entered_only:
            statement = statement.where(_entered_clause(row_model))
        async with self._session_factory() as session:
            try:
                results = await session.execute(statement.limit(1))
                return results.scalar_one_or_none() is not None
            except SQLAlchemyError as e:
                logger.error(
                    f"Error looking up {device_id} in {row_model.__tablename__}: {e}",
                    exc_info=True,
                )
                raise StorageError(
                    f"Failed to look up '{device_id}' in '{row_model.__tablename__}'"
                ) from e

    @staticmethod
    async def _stamp_checkout(
        session, row_model: DeviceRowModel, device_id: DeviceId, at: datetime
    ) -> int:
        statement = (
            update(row_model)
            .where(
                row_model.id == device_id,
                _entered_clause(row_model),
                row_model.checkin_at <= at,
            )
            .values(checkout_at=at, updated_at=at)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(statement)
        return result.rowcount
