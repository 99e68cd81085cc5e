"""
共享領域模組

包含所有領域共用的模型與工具。
"""

# 從基本模型導出
from app.domains.common.models.base_model import (
    DomainBaseModel,
    Entity,
    ValueObject,
)

# 從時間工具導出
from app.domains.common.utils.datetime_utils import (
    utc_now,
    ensure_utc,
)
