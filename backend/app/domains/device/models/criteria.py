from typing import Any, Optional, Tuple

from pydantic import Field

from app.domains.common.models.base_model import DomainBaseModel

# 只指定 offset 而未指定 limit 時使用的預設頁面大小
DEFAULT_PAGE_SIZE = 10


class DeviceFilter(DomainBaseModel):
    """單一欄位的等值過濾條件"""

    field: str = Field(..., min_length=1, description="欄位名稱")
    value: Any = Field(..., description="欄位值")


class DeviceSort(DomainBaseModel):
    """單一欄位排序"""

    field: str = Field(..., min_length=1, description="欄位名稱")
    is_ascending: bool = Field(True, description="是否為升冪排序")


class DeviceCriteria(DomainBaseModel):
    """設備查詢條件：可選的過濾、排序與分頁"""

    filter_by: Optional[DeviceFilter] = Field(None, description="等值過濾")
    sort_by: Optional[DeviceSort] = Field(None, description="排序")
    limit: Optional[int] = Field(None, ge=0, description="最多返回筆數")
    offset: Optional[int] = Field(None, ge=0, description="略過筆數")

    def window(self) -> Tuple[int, Optional[int]]:
        """將 limit/offset 正規化為 (offset, limit)

        只有 offset 時 limit 採用 DEFAULT_PAGE_SIZE；兩者皆無時 limit 為 None（不限制）。
        """
        if self.offset is None:
            return 0, self.limit
        limit = self.limit if self.limit is not None else DEFAULT_PAGE_SIZE
        return self.offset, limit
