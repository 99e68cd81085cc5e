from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from app.domains.device.models.criteria import DeviceCriteria
from app.domains.device.models.device_model import (
    Computer,
    DeviceId,
    EnteredDevice,
    FrequentComputer,
    MedicalDevice,
)


class DeviceRepository(ABC):
    """設備存儲庫接口，定義三類設備的入場、出場與查詢操作

    所有實現都必須遵守相同的契約：
    - 入場或出場的目標不存在時拋出 DeviceNotFoundError
    - 同一類別中識別符重複時拋出 DuplicateDeviceError
    - 後端失敗以 StorageError 拋出，不重試
    """

    # --- Frequent Computers ---
    @abstractmethod
    async def register_frequent_computer(
        self, computer: FrequentComputer
    ) -> FrequentComputer:
        """登記一台常客電腦"""
        pass

    @abstractmethod
    async def get_frequent_computers(
        self, criteria: DeviceCriteria
    ) -> List[FrequentComputer]:
        """依條件查詢常客電腦"""
        pass

    @abstractmethod
    async def checkin_frequent_computer(
        self, device_id: DeviceId, at: datetime
    ) -> FrequentComputer:
        """常客電腦入場，更新 checkin_at

        已在場內，或 at 不晚於上次出場時間時拋出 InvalidCheckinError。
        """
        pass

    @abstractmethod
    async def is_frequent_computer_registered(self, device_id: DeviceId) -> bool:
        """檢查常客電腦是否已登記"""
        pass

    # --- Computers ---
    @abstractmethod
    async def checkin_computer(self, computer: Computer) -> Computer:
        """電腦入場，新增一筆記錄並以目前時間作為 checkin_at"""
        pass

    @abstractmethod
    async def get_computers(self, criteria: DeviceCriteria) -> List[Computer]:
        """依條件查詢電腦"""
        pass

    # --- Medical Devices ---
    @abstractmethod
    async def checkin_medical_device(self, device: MedicalDevice) -> MedicalDevice:
        """醫療設備入場，新增一筆記錄並以目前時間作為 checkin_at"""
        pass

    @abstractmethod
    async def get_medical_devices(
        self, criteria: DeviceCriteria
    ) -> List[MedicalDevice]:
        """依條件查詢醫療設備"""
        pass

    # --- All Devices ---
    @abstractmethod
    async def get_entered_devices(
        self, criteria: DeviceCriteria
    ) -> List[EnteredDevice]:
        """同時查詢在場的電腦與醫療設備，依類別標記後合併

        常客電腦不在此投影中。
        """
        pass

    @abstractmethod
    async def checkout_device(self, device_id: DeviceId, at: datetime) -> None:
        """設備出場

        依序嘗試電腦、醫療設備、常客電腦。前兩者失敗即中止；
        常客電腦的失敗只記錄日誌，不阻擋其他類別出場。
        """
        pass

    @abstractmethod
    async def is_device_entered(self, device_id: DeviceId) -> bool:
        """檢查電腦或醫療設備是否在場內"""
        pass
