"""Pure logic helpers for history row display."""

from datetime import datetime
from typing import Optional

from ..persistence.models import JobExecutionRecord


def format_duration(seconds: Optional[float]) -> str:
    """Format a run duration as ``1h 2m 3s`` / ``2m 3s`` / ``3s`` (``-`` when unknown)."""
    if not seconds or seconds < 0:
        return "-"

    total = int(seconds)
    minutes, secs = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_time_ago(timestamp: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Compact age of a timestamp relative to ``now``."""
    if timestamp is None:
        return "-"

    current = now or datetime.now().astimezone()
    minutes = int((current - timestamp).total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d {hours % 24}h"
    if minutes > 59:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m ago"
    return "Just now"


def is_my_job(
    record: JobExecutionRecord,
    current_user_email: Optional[str],
    only_mine: bool,
) -> bool:
    """Return True when a row should be highlighted as the current user's run.

    Highlighting is pointless in "only mine" mode, so it is off there.
    """
    if only_mine:
        return False
    if not current_user_email or not record.triggered_by:
        return False
    return record.triggered_by.lower() == current_user_email.lower()
