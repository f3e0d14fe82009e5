"""
Unit tests for offline duration formatting.
"""

import pytest

from src.utils.time_format import format_duration


@pytest.mark.parametrize(
    "minutes,expected",
    [
        (0, "0m"),
        (45, "45m"),
        (59, "59m"),
        (60, "1h"),
        (120, "2h"),
        (125, "2h 5m"),
        (1439, "23h 59m"),
        (1440, "1d"),
        (1499, "1d"),
        (1500, "1d 1h"),
        (4560, "3d 4h"),
        (4619, "3d 4h"),
    ],
)
def test_format_duration(minutes, expected):
    assert format_duration(minutes) == expected


def test_negative_is_zero():
    assert format_duration(-30) == "0m"
