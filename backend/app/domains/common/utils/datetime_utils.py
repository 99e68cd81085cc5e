from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """取得目前的 UTC 時間（帶時區）"""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """將時間正規化為 UTC

    無時區的時間視為 UTC（例如 SQLite 讀回的 timestamptz 欄位）。

    Args:
        value: 任意時間或 None

    Returns:
        帶 UTC 時區的時間，輸入為 None 時返回 None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
