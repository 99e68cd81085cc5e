"""
設備領域模組

包含電腦、醫療設備與常客電腦的模型、服務、儲存庫和 API 實現。
主要處理設備的入場、出場以及在場狀態查詢。
"""

from app.domains.device.models.device_model import (
    Computer,
    DeviceKind,
    EnteredDevice,
    FrequentComputer,
    MedicalDevice,
    Owner,
)
from app.domains.device.models.criteria import DeviceCriteria, DeviceFilter, DeviceSort
from app.domains.device.interfaces.device_repository import DeviceRepository
from app.domains.device.adapters.sqlmodel_device_repository import SQLModelDeviceRepository
from app.domains.device.adapters.memory_device_repository import InMemoryDeviceRepository
