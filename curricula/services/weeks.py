"""教学周计算。

采用 ISO 8601 周次：周一为一周开始，包含当年第一个周四的那一周为第 1 周。
"""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def today_in(tz_name: str, now: Optional[datetime] = None) -> date:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    tz = timezone.utc if tz_name.upper() == "UTC" else ZoneInfo(tz_name)
    return now.astimezone(tz).date()


def current_week(now: Optional[datetime] = None, tz_name: str = "UTC") -> int:
    return today_in(tz_name, now).isocalendar()[1]
