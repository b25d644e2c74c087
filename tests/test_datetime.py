"""Tests for the timezone helpers used in messages and quiet hours."""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

import pytest

from app.utils import format_display_date, parse_time_of_day
from app.utils.datetime import _resolve_timezone

from tests.conftest import SEOUL


def test_offset_names_resolve_to_fixed_offsets() -> None:
    assert _resolve_timezone("UTC+09:00") == timezone(timedelta(hours=9))
    assert _resolve_timezone("GMT-0530") == timezone(-timedelta(hours=5, minutes=30))


def test_unknown_timezone_falls_back_to_seoul() -> None:
    assert str(_resolve_timezone("Mars/Olympus")) == "Asia/Seoul"


def test_display_date_uses_app_timezone() -> None:
    value = datetime(2026, 3, 1, 20, 5, 9, tzinfo=timezone.utc)

    assert format_display_date(value.astimezone(SEOUL)) == "2026. 3. 2."
    assert format_display_date(value.astimezone(SEOUL), with_time=True) == "2026. 3. 2. 05:05:09"


def test_time_of_day_parsing() -> None:
    assert parse_time_of_day("7:30") == time(7, 30)
    assert parse_time_of_day(time(22, 0)) == time(22, 0)
    with pytest.raises(ValueError):
        parse_time_of_day("late")
