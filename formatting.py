"""Display formatting for dashboard numbers and dates."""
from datetime import datetime, timezone


def format_number(num: float) -> str:
    """Format a number with K/M suffix for large numbers."""
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}".removesuffix(".0") + "M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}".removesuffix(".0") + "K"
    return str(num)


def format_percent(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"


def _to_datetime(value: datetime | str) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def format_date(value: datetime | str) -> str:
    """e.g. 'Mar 5, 2026'"""
    d = _to_datetime(value)
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def format_relative_time(value: datetime | str, now: datetime | None = None) -> str:
    """Format a relative time (e.g. '2 days ago')."""
    d = _to_datetime(value)
    now = now or datetime.now(timezone.utc)
    diff_days = (now - d).days

    if diff_days <= 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if diff_days < 7:
        return f"{diff_days} days ago"
    if diff_days < 30:
        return f"{diff_days // 7} weeks ago"
    if diff_days < 365:
        return f"{diff_days // 30} months ago"
    return f"{diff_days // 365} years ago"


def truncate(text: str, max_length: int) -> str:
    """Truncate text to a maximum length with ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def calculate_engagement_rate(likes: int, comments: int, reposts: int, impressions: int) -> float:
    """Engagement as a percentage of impressions; 0 when there are none."""
    if not impressions:
        return 0.0
    return ((likes + comments + reposts) / impressions) * 100
