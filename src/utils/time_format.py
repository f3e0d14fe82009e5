"""
Human-readable durations for offline summaries.

>>> format_duration(45)
'45m'
>>> format_duration(125)
'2h 5m'
>>> format_duration(120)
'2h'
>>> format_duration(4560)
'3d 4h'
"""

from __future__ import annotations

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR


def format_duration(minutes: int) -> str:
    """
    Format whole minutes as at most the two most significant units.

    A zero trailing unit is left out ("1h", "1d"). Negative input is treated
    as zero. Past one day the minutes are dropped.
    """
    minutes = max(0, int(minutes))

    if minutes >= MINUTES_PER_DAY:
        days, rest = divmod(minutes, MINUTES_PER_DAY)
        hours = rest // MINUTES_PER_HOUR
        return f"{days}d {hours}h" if hours else f"{days}d"

    if minutes >= MINUTES_PER_HOUR:
        hours, rest = divmod(minutes, MINUTES_PER_HOUR)
        return f"{hours}h {rest}m" if rest else f"{hours}h"

    return f"{minutes}m"
