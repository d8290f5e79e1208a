"""Day resolver tests: local calendar dates and Monday-first weeks."""

from datetime import date, datetime, timezone

import pytest

from streakboard.config import get_settings
from streakboard.progress.day_resolver import (
    get_monday,
    lookback_start,
    resolve_timezone,
    today,
    week_bounds,
)


class TestResolveTimezone:
    """Unknown or missing zones degrade instead of raising."""

    def test_known_zone(self):
        assert str(resolve_timezone("Asia/Tashkent")) == "Asia/Tashkent"

    @pytest.mark.parametrize("name", [None, "", "Not/AZone", "   ", "../etc/passwd"])
    def test_unusable_name_falls_back_to_default(self, name):
        assert resolve_timezone(name).utcoffset(datetime(2026, 1, 1)) == timezone.utc.utcoffset(None)

    def test_invalid_default_falls_back_to_utc(self, monkeypatch):
        monkeypatch.setenv("SB_DEFAULT_TIMEZONE", "Nowhere/Nothing")
        get_settings.cache_clear()
        assert resolve_timezone("Also/Missing") is timezone.utc

    def test_configured_default_is_used(self, monkeypatch):
        monkeypatch.setenv("SB_DEFAULT_TIMEZONE", "Asia/Tashkent")
        get_settings.cache_clear()
        assert str(resolve_timezone(None)) == "Asia/Tashkent"


class TestToday:
    """Calendar date of an instant in the submitter's zone."""

    def test_utc(self):
        now = datetime(2026, 3, 1, 22, 30, tzinfo=timezone.utc)
        assert today("UTC", now) == date(2026, 3, 1)

    def test_positive_offset_crosses_midnight(self):
        """22:30 UTC is already the next day in Tashkent (UTC+5)."""
        now = datetime(2026, 3, 1, 22, 30, tzinfo=timezone.utc)
        assert today("Asia/Tashkent", now) == date(2026, 3, 2)

    def test_negative_offset_stays_on_previous_day(self):
        now = datetime(2026, 3, 2, 2, 0, tzinfo=timezone.utc)
        assert today("America/New_York", now) == date(2026, 3, 1)

    def test_naive_now_is_utc(self):
        assert today("Asia/Tashkent", datetime(2026, 3, 1, 20, 0)) == date(2026, 3, 2)

    def test_unknown_zone_never_raises(self):
        now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert today("Mars/Olympus_Mons", now) == date(2026, 3, 1)


class TestWeekBounds:
    """Monday-first weeks."""

    def test_sunday_is_index_6(self):
        now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)  # Sunday
        bounds = week_bounds("UTC", now)
        assert bounds.monday == date(2026, 2, 23)
        assert bounds.sunday == date(2026, 3, 1)
        assert bounds.today_index == 6

    def test_monday_is_index_0(self):
        now = datetime(2026, 2, 23, 0, 0, tzinfo=timezone.utc)
        bounds = week_bounds("UTC", now)
        assert bounds.monday == date(2026, 2, 23)
        assert bounds.today_index == 0

    def test_week_follows_local_date(self):
        """Sunday 22:00 UTC is Monday in Tashkent, so a new week has started there."""
        now = datetime(2026, 3, 1, 22, 0, tzinfo=timezone.utc)
        bounds = week_bounds("Asia/Tashkent", now)
        assert bounds.monday == date(2026, 3, 2)
        assert bounds.today_index == 0


class TestDateHelpers:
    def test_get_monday(self):
        assert get_monday(date(2026, 2, 25)) == date(2026, 2, 23)
        assert get_monday(date(2026, 2, 23)) == date(2026, 2, 23)

    def test_lookback_start_is_inclusive(self):
        assert lookback_start(date(2026, 3, 21), 21) == date(2026, 3, 1)
        assert lookback_start(date(2026, 3, 21), 1) == date(2026, 3, 21)
