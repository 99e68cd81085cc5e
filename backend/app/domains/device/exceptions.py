"""
設備領域錯誤

服務層與儲存庫只拋出以下錯誤，由 API 層轉換成 HTTP 回應。
"""

from typing import Any, Dict, List, Optional


class DeviceError(Exception):
    """設備領域錯誤基類"""

    code = "device_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DeviceNotFoundError(DeviceError):
    """入場或出場的目標設備不存在"""

    code = "device_not_found"

    def __init__(self, device_id: str):
        super().__init__(f"Device '{device_id}' not found")
        self.device_id = device_id


class DuplicateDeviceError(DeviceError):
    """設備識別符已存在於同一類別中"""

    code = "duplicate_device"

    def __init__(self, device_id: str):
        super().__init__(f"Device '{device_id}' already exists")
        self.device_id = device_id


class InvalidCheckinError(DeviceError):
    """設備存在但無法入場（已在場內或入場時間不晚於上次出場時間）"""

    code = "invalid_checkin"

    def __init__(self, device_id: str, reason: str):
        super().__init__(f"Device '{device_id}' cannot be checked in: {reason}")
        self.device_id = device_id
        self.reason = reason


class InvalidCheckoutError(DeviceError):
    """設備存在但無法出場（不在場內或出場時間早於入場時間）"""

    code = "invalid_checkout"

    def __init__(self, device_id: str, reason: str):
        super().__init__(f"Device '{device_id}' cannot be checked out: {reason}")
        self.device_id = device_id
        self.reason = reason


class DeviceValidationError(DeviceError):
    """請求格式錯誤，於任何儲存操作之前拋出"""

    code = "validation_error"

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class InvalidCriteriaError(DeviceValidationError):
    """查詢條件引用了不存在的欄位或無法轉換的值"""

    code = "invalid_criteria"


class StorageError(DeviceError):
    """後端儲存失敗，原始例外保留在 __cause__"""

    code = "storage_error"
