"""Small text formatters shared by hosts (panel labels, tooltips, CLI)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

BAR_FILLED = "█"
BAR_EMPTY = "░"


def format_tokens(n: int) -> str:
    """Format a token count for display."""
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 10_000:
        return f"{n // 1_000}K"
    if n >= 1_000:
        return f"{n / 1_000:.1f}K"
    return f"{n:,}"


def make_bar(pct: float, width: int = 8) -> str:
    """Render ``pct`` as a fixed-width block bar."""
    filled = int(pct / 100.0 * width + 0.5)
    filled = max(0, min(width, filled))
    return BAR_FILLED * filled + BAR_EMPTY * (width - filled)


def _remaining(resets_at: datetime, now: datetime | None) -> timedelta:
    now = now or datetime.now(timezone.utc)
    remaining = resets_at - now
    return max(remaining, timedelta(0))


def format_five_hour_reset(resets_at: datetime, now: datetime | None = None) -> str:
    """``"(2h 15m)"``, or ``"(15m)"`` inside the last hour."""
    total_minutes = int(_remaining(resets_at, now).total_seconds() // 60)
    hours, mins = divmod(total_minutes, 60)
    if hours > 0:
        return f"({hours}h {mins}m)"
    return f"({mins}m)"


def format_seven_day_reset(resets_at: datetime, now: datetime | None = None) -> str:
    """``"(3d 4h)"``, or ``"(4h)"`` inside the last day."""
    total_hours = int(_remaining(resets_at, now).total_seconds() // 3600)
    days, hours = divmod(total_hours, 24)
    if days > 0:
        return f"({days}d {hours}h)"
    return f"({hours}h)"
