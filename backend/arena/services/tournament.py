"""
锦标赛倒计时：距下一个本地零点的剩余时间
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional


def time_until_next_tournament(now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    计算距下一场锦标赛（明日零点）的剩余时间

    Args:
        now: 当前时间（默认本地时间）

    Returns:
        dict: {"hours", "minutes", "starts_at", "display"}
    """
    now = now or datetime.now()
    tomorrow = (now + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    remaining = int((tomorrow - now).total_seconds())
    hours, rest = divmod(remaining, 3600)
    minutes = rest // 60
    return {
        "hours": hours,
        "minutes": minutes,
        "starts_at": tomorrow.isoformat(),
        "display": f"{hours}h {minutes}m",
    }
