"""Statistics summary tests over fixed history snapshots."""

from datetime import date, timedelta
from decimal import Decimal

from streakboard.progress.day_resolver import WeekBounds
from streakboard.progress.service import ProgressTotals
from streakboard.stats.service import best_day, build_summary, week_daily_points

MONDAY = date(2026, 2, 23)
WEEK = WeekBounds(MONDAY, MONDAY + timedelta(days=6), 2)
TODAY = MONDAY + timedelta(days=2)  # Wednesday


class TestWeekDailyPoints:
    def test_always_seven_entries(self, make_day):
        assert week_daily_points([], MONDAY) == [0] * 7
        history = [make_day(MONDAY, points=4), make_day(MONDAY + timedelta(days=6), points=9)]
        assert week_daily_points(history, MONDAY) == [4, 0, 0, 0, 0, 0, 9]

    def test_days_outside_the_week_are_ignored(self, make_day):
        history = [make_day(MONDAY - timedelta(days=1), points=10), make_day(MONDAY + timedelta(days=7), points=10)]
        assert week_daily_points(history, MONDAY) == [0] * 7


class TestBestDay:
    def test_first_max_wins(self):
        assert best_day([3, 8, 2, 8, 0, 0, 0]) == {"index": 1, "weekday": "Tuesday", "points": 8}

    def test_all_zero_is_monday(self):
        assert best_day([0] * 7)["weekday"] == "Monday"


class TestBuildSummary:
    def test_today_absent_is_zeros(self, make_day):
        history = [make_day(MONDAY, points=6, pages_read=10)]
        summary = build_summary(history, ProgressTotals(6, 10, Decimal("0.00"), 1), TODAY, WEEK, 90)
        assert summary["today"]["date"] == TODAY
        assert summary["today"]["exists"] is False
        assert summary["today"]["tasks"] == [0] * 10
        assert summary["today"]["total_points"] == 0

    def test_week_and_all_time(self, make_day):
        history = [
            make_day(TODAY, points=10, pages_read=30, distance_km="2.5"),
            make_day(TODAY - timedelta(days=1), points=10, pages_read=20, distance_km="1.25"),
            make_day(MONDAY, points=3, pages_read=5),
            make_day(MONDAY - timedelta(days=3), points=7, pages_read=100),
        ]
        totals = ProgressTotals(points=30, pages=155, distance=Decimal("3.75"), days=4)
        summary = build_summary(history, totals, TODAY, WEEK, 90)

        week = summary["this_week"]
        assert week["daily_points"] == [3, 10, 10, 0, 0, 0, 0]
        assert week["total_points"] == 23
        assert week["total_pages"] == 55
        assert week["total_distance"] == Decimal("3.75")
        assert week["today_index"] == 2
        assert week["best_day"]["weekday"] == "Tuesday"

        all_time = summary["all_time"]
        assert all_time["total_points"] == 30
        assert all_time["total_days"] == 4
        assert all_time["current_streak"] == 3
        assert all_time["longest_streak"] == 3
        assert all_time["perfectionist_streak"] == 2
        assert all_time["early_bird_streak"] == 2

        assert summary["today"]["exists"] is True
        assert summary["today"]["completion_percentage"] == 100

    def test_longest_streak_can_come_from_outside_history(self, make_day):
        history = [make_day(TODAY, points=1)]
        totals = ProgressTotals(points=1, pages=0, distance=Decimal("0"), days=41)
        summary = build_summary(history, totals, TODAY, WEEK, 90, longest=40)
        assert summary["all_time"]["longest_streak"] == 40
        assert summary["all_time"]["current_streak"] == 1
