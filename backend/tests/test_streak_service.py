"""
Tests for StreakService.

Tests cover:
1. Logging, daily-goal, weekly-goal and no-penalty streak calculation
2. Milestone awards (each milestone is paid once)
3. Weekly goal triggers
4. The day-logging flow
"""
import pytest
from datetime import date, datetime, timedelta

from backend.services.streak_service import StreakService
from backend.services.fp_service import FpService
from backend.models import DailyLog
from backend.schemas import DailyLogCreate
from backend.exceptions import UserNotFoundException


@pytest.fixture
def add_logs(db_session):
    """Insert daily logs: add_logs('alice', {date: (task_points, penalty_points)})"""
    def _add_logs(user_id, entries):
        for day, (points, penalty) in entries.items():
            db_session.add(DailyLog(user_id=user_id, date=day, task_points=points, penalty_points=penalty))
        db_session.commit()
    return _add_logs


def consecutive(end: date, days: int, points: int = 120, penalty: int = 0):
    return {end - timedelta(days=offset): (points, penalty) for offset in range(days)}


class TestLoggingStreak:
    """Tests for get_logging_streak"""

    def test_counts_consecutive_days(self, db_session, habit_settings, add_logs):
        add_logs("alice", consecutive(date(2024, 1, 10), 5))
        assert StreakService(db_session).get_logging_streak("alice", date(2024, 1, 10)) == 5

    def test_yesterday_keeps_streak_alive(self, db_session, habit_settings, add_logs):
        add_logs("alice", consecutive(date(2024, 1, 9), 3))
        assert StreakService(db_session).get_logging_streak("alice", date(2024, 1, 10)) == 3

    def test_stale_streak_is_zero(self, db_session, habit_settings, add_logs):
        add_logs("alice", consecutive(date(2024, 1, 8), 3))
        assert StreakService(db_session).get_logging_streak("alice", date(2024, 1, 10)) == 0

    def test_gap_breaks_streak(self, db_session, habit_settings, add_logs):
        logs = consecutive(date(2024, 1, 10), 2)
        logs.update(consecutive(date(2024, 1, 7), 4))
        add_logs("alice", logs)
        assert StreakService(db_session).get_logging_streak("alice", date(2024, 1, 10)) == 2


class TestGoalStreaks:
    """Tests for daily-goal, weekly-goal and no-penalty streaks"""

    def test_daily_goal_streak_stops_at_missed_goal(self, db_session, habit_settings, add_logs):
        logs = consecutive(date(2024, 1, 10), 3, points=150)
        logs[date(2024, 1, 7)] = (50, 0)
        logs[date(2024, 1, 6)] = (150, 0)
        add_logs("alice", logs)

        assert StreakService(db_session).get_daily_goal_streak("alice", date(2024, 1, 10)) == 3

    def test_penalties_count_against_daily_goal(self, db_session, habit_settings, add_logs):
        add_logs("alice", {date(2024, 1, 10): (110, -20)})
        assert StreakService(db_session).get_daily_goal_streak("alice", date(2024, 1, 10)) == 0

    def test_daily_goal_streak_without_goal(self, db_session, make_user, add_logs):
        make_user("bob")
        add_logs("bob", consecutive(date(2024, 1, 10), 3))
        assert StreakService(db_session).get_daily_goal_streak("bob", date(2024, 1, 10)) == 0

    def test_weekly_goal_streak_counts_consecutive_weeks(self, db_session, habit_settings, add_logs):
        # Weeks of 2024-01-01 and 2024-01-08 both reach 500; week of 2023-12-25 does not
        add_logs("alice", {
            date(2024, 1, 2): (300, 0), date(2024, 1, 4): (250, 0),
            date(2024, 1, 8): (500, 0),
            date(2023, 12, 27): (100, 0),
        })

        assert StreakService(db_session).get_weekly_goal_streak("alice", date(2024, 1, 14)) == 2

    def test_no_penalty_streak(self, db_session, habit_settings, add_logs):
        add_logs("alice", {
            date(2024, 1, 15): (10, 0),
            date(2024, 1, 9): (10, 0),
            date(2024, 1, 3): (10, -5),
        })

        assert StreakService(db_session).get_no_penalty_streak("alice", date(2024, 1, 16)) == 2

    def test_get_streaks_bundles_all(self, db_session, habit_settings, add_logs):
        add_logs("alice", consecutive(date(2024, 1, 10), 3, points=150))

        streaks = StreakService(db_session).get_streaks("alice", date(2024, 1, 10))

        assert streaks.logging_streak == 3
        assert streaks.daily_goal_streak == 3
        assert streaks.no_penalty_streak == 1


class TestMilestones:
    """Milestones are awarded once, at every threshold reached"""

    def test_logging_milestone_awarded_once(self, db_session, habit_settings, add_logs):
        add_logs("alice", consecutive(date(2024, 1, 10), 7))
        service = StreakService(db_session)
        now = datetime(2024, 1, 10, 21, 0)

        first = service.award_logging_streak_milestones("alice", now)
        second = service.award_logging_streak_milestones("alice", now + timedelta(days=1))

        assert [r.message for r in first] == ["7-day logging streak"]
        assert second == []
        assert FpService(db_session).get_total("alice") == 5

    def test_multiple_thresholds_in_one_pass(self, db_session, habit_settings, add_logs):
        add_logs("alice", consecutive(date(2024, 1, 10), 7, points=150))

        awards = StreakService(db_session).award_daily_goal_streak_milestones("alice", datetime(2024, 1, 10, 21, 0))

        assert [a.fp_awarded for a in awards] == [5, 10]

    def test_received_milestone_is_skipped(self, db_session, habit_settings, add_logs, make_log_entry, monkeypatch):
        """Milestones already in the ledger are not attempted again"""
        add_logs("alice", consecutive(date(2024, 1, 10), 7))
        make_log_entry("alice", "logging_streak_7", 5, datetime(2023, 6, 1))
        service = StreakService(db_session)
        attempted = []
        monkeypatch.setattr(
            service.fp_service, "award_fp",
            lambda user_id, event_type, **kwargs: attempted.append(event_type)
        )

        awards = service.award_logging_streak_milestones("alice", datetime(2024, 1, 10, 21, 0))

        assert awards == []
        assert attempted == []


class TestWeeklyTriggers:
    """Tests for check_weekly_triggers"""

    WEDNESDAY = datetime(2024, 1, 10, 20, 0)

    def test_hit_weekly_goal(self, db_session, habit_settings):
        awards = StreakService(db_session).check_weekly_triggers("alice", 500, 500, self.WEDNESDAY)
        assert [a.fp_awarded for a in awards] == [40]

    def test_within_five_percent(self, db_session, habit_settings):
        awards = StreakService(db_session).check_weekly_triggers("alice", 475, 500, self.WEDNESDAY)
        assert [a.message for a in awards] == ["Came within 5% of weekly goal"]

    def test_below_threshold_awards_nothing(self, db_session, habit_settings):
        assert StreakService(db_session).check_weekly_triggers("alice", 474, 500, self.WEDNESDAY) == []

    def test_monday_checks_no_penalty_milestones(self, db_session, habit_settings, add_logs):
        add_logs("alice", {date(2024, 1, 9): (10, 0)})

        awards = StreakService(db_session).check_weekly_triggers("alice", 0, 500, datetime(2024, 1, 15, 9, 0))

        assert [a.message for a in awards] == ["No penalties all week"]

    def test_no_penalty_week_repeats_in_later_weeks(self, db_session, habit_settings, add_logs, make_log_entry):
        make_log_entry("alice", "no_penalties_week", 10, datetime(2024, 1, 8, 9, 0))
        add_logs("alice", {date(2024, 1, 9): (10, 0)})

        awards = StreakService(db_session).check_weekly_triggers("alice", 0, 500, datetime(2024, 1, 15, 9, 0))

        assert [a.message for a in awards] == ["No penalties all week"]


class TestLogDay:
    """Tests for the log_day flow"""

    def test_first_log_awards_log_day_and_daily_goal(self, db_session, habit_settings):
        service = StreakService(db_session)

        log, awards = service.log_day(
            "alice",
            DailyLogCreate(date=date(2024, 1, 10), task_points=80, todo_points=40),
            now=datetime(2024, 1, 10, 20, 0)
        )

        assert log.total_points == 120
        assert [a.message for a in awards] == ["Logged the day", "Hit daily point goal"]
        assert FpService(db_session).get_total("alice") == 13

    def test_relogging_same_day_updates_without_awards(self, db_session, habit_settings):
        service = StreakService(db_session)
        now = datetime(2024, 1, 10, 20, 0)
        service.log_day("alice", DailyLogCreate(date=date(2024, 1, 10), task_points=20), now=now)

        log, awards = service.log_day(
            "alice", DailyLogCreate(date=date(2024, 1, 10), task_points=30, penalty_points=-5), now=now
        )

        assert log.total_points == 25
        assert awards == []
        assert db_session.query(DailyLog).count() == 1
        assert FpService(db_session).get_total("alice") == 3

    def test_unknown_user_raises(self, db_session):
        with pytest.raises(UserNotFoundException):
            StreakService(db_session).log_day("ghost", DailyLogCreate(date=date(2024, 1, 10)))

    def test_backfilled_day_awards_nothing(self, db_session, habit_settings):
        """A past day is saved without FP and does not block today's awards"""
        service = StreakService(db_session)
        now = datetime(2024, 1, 17, 20, 0)

        backfill, backfill_awards = service.log_day(
            "alice", DailyLogCreate(date=date(2024, 1, 9), task_points=150), now=now
        )
        _, today_awards = service.log_day(
            "alice", DailyLogCreate(date=date(2024, 1, 17), task_points=150), now=now
        )

        assert backfill.total_points == 150
        assert backfill_awards == []
        assert [a.message for a in today_awards] == ["Logged the day", "Hit daily point goal"]
        assert FpService(db_session).get_total("alice") == 13
