"""
查詢條件正規化

將 DeviceCriteria 驗證並轉換為針對特定資料表的查詢參數，
SQLModel 與記憶體儲存庫共用同一套規則。
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError

from app.domains.common.utils.datetime_utils import ensure_utc
from app.domains.device.exceptions import InvalidCriteriaError
from app.domains.device.models.criteria import DeviceCriteria
from app.domains.device.models.row_model import DeviceRow, DeviceRowModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedCriteria:
    filter_field: Optional[str] = None
    filter_value: Any = None
    sort_field: Optional[str] = None
    is_ascending: bool = True
    offset: int = 0
    limit: Optional[int] = None


def _check_field(row_model: DeviceRowModel, field: str) -> None:
    if field not in row_model.model_fields:
        raise InvalidCriteriaError(
            f"Unknown field '{field}' for {row_model.__tablename__}",
            errors=[{"field": field, "table": row_model.__tablename__}],
        )


def _coerce_value(row_model: DeviceRowModel, field: str, value: Any) -> Any:
    annotation = row_model.model_fields[field].annotation
    try:
        coerced = TypeAdapter(annotation).validate_python(value)
    except ValidationError as e:
        raise InvalidCriteriaError(
            f"Invalid value for field '{field}': {value!r}", errors=e.errors()
        ) from e
    if isinstance(coerced, datetime):
        return ensure_utc(coerced)
    return coerced


def resolve_criteria(
    row_model: DeviceRowModel, criteria: Optional[DeviceCriteria]
) -> ResolvedCriteria:
    """驗證查詢條件中的欄位並轉換過濾值的型別

    Raises:
        InvalidCriteriaError: 欄位不屬於該資料表或值無法轉換
    """
    criteria = criteria or DeviceCriteria()
    offset, limit = criteria.window()
    resolved = {"offset": offset, "limit": limit}

    if criteria.filter_by is not None:
        field = criteria.filter_by.field
        _check_field(row_model, field)
        resolved["filter_field"] = field
        resolved["filter_value"] = _coerce_value(
            row_model, field, criteria.filter_by.value
        )

    if criteria.sort_by is not None:
        _check_field(row_model, criteria.sort_by.field)
        resolved["sort_field"] = criteria.sort_by.field
        resolved["is_ascending"] = criteria.sort_by.is_ascending

    return ResolvedCriteria(**resolved)


def apply_criteria(rows: Iterable[DeviceRow], resolved: ResolvedCriteria) -> List[DeviceRow]:
    """在記憶體中套用過濾、排序與分頁

    排序時 NULL 在升冪時排最後、降冪時排最前，與 PostgreSQL 預設一致。
    """
    result = list(rows)

    if resolved.filter_field is not None:
        result = [
            row
            for row in result
            if getattr(row, resolved.filter_field) == resolved.filter_value
        ]

    if resolved.sort_field is not None:
        field = resolved.sort_field
        present = [row for row in result if getattr(row, field) is not None]
        missing = [row for row in result if getattr(row, field) is None]
        present.sort(key=lambda row: getattr(row, field), reverse=not resolved.is_ascending)
        result = present + missing if resolved.is_ascending else missing + present

    end = None if resolved.limit is None else resolved.offset + resolved.limit
    return result[resolved.offset : end]
