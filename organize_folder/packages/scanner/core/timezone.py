"""时间工具方法：文件系统时间戳统一转换为 UTC 的 ISO-8601 字符串。"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def from_timestamp(value: float) -> datetime:
    """将 ``os.stat`` 返回的秒级时间戳转换为带 UTC 时区的 ``datetime``。"""
    return datetime.fromtimestamp(value, tz=timezone.utc)


def to_iso_utc(value: Optional[datetime]) -> Optional[str]:
    """格式化为 ``YYYY-MM-DDTHH:MM:SS.mmmZ``，无时区对象按 UTC 处理。"""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def timestamp_to_iso(value: float) -> str:
    return to_iso_utc(from_timestamp(value))
