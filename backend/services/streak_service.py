"""
Streak service.
Computes logging, goal and no-penalty streaks from daily logs, awards the
matching FP milestones and handles the day-logging flow that triggers awards.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session

from backend.models import DailyLog
from backend.repositories.daily_log_repository import DailyLogRepository, HabitSettingsRepository
from backend.repositories.fp_repository import UserRepository
from backend.services.date_service import DateService
from backend.services.fp_service import FpService
from backend.fp_rules import get_fp_rule
from backend.exceptions import UserNotFoundException
from backend.schemas import FpAwardResult, DailyLogCreate, StreaksResponse
from backend.constants import (
    WINDOW_ONCE,
    STREAK_LOOKBACK_DAYS,
    WITHIN_WEEKLY_GOAL_RATIO,
    LOGGING_STREAK_MILESTONES,
    DAILY_GOAL_STREAK_MILESTONES,
    WEEKLY_GOAL_STREAK_MILESTONES,
    NO_PENALTY_STREAK_MILESTONES,
)

logger = logging.getLogger("frisfocus.streaks")


class StreakService:
    """Service for streak computation and milestone awards"""

    def __init__(self, db: Session):
        self.db = db
        self.log_repo = DailyLogRepository()
        self.settings_repo = HabitSettingsRepository()
        self.user_repo = UserRepository()
        self.fp_service = FpService(db)
        self.date_service = DateService()

    # ===== STREAK CALCULATION =====

    def get_logging_streak(self, user_id: str, today: date) -> int:
        """Consecutive logged days ending today or yesterday"""
        logs = self.log_repo.get_recent(self.db, user_id)
        if not self._is_current_day(logs, today):
            return 0

        streak = 1
        for previous, current in zip(logs, logs[1:]):
            if (previous.date - current.date).days != 1:
                break
            streak += 1
        return streak

    def get_daily_goal_streak(self, user_id: str, today: date) -> int:
        """Consecutive days, most recent first, whose total met the daily goal"""
        daily_goal = self.settings_repo.get(self.db, user_id).daily_goal
        if not daily_goal:
            return 0

        logs = self.log_repo.get_recent(self.db, user_id)
        if not self._is_current_day(logs, today):
            return 0

        streak = 0
        for index, log in enumerate(logs):
            if index > 0 and (logs[index - 1].date - log.date).days != 1:
                break
            if log.total_points < daily_goal:
                break
            streak += 1
        return streak

    def get_weekly_goal_streak(self, user_id: str, today: date) -> int:
        """Consecutive weeks, most recent first, whose total met the weekly goal"""
        weekly_goal = self.settings_repo.get(self.db, user_id).weekly_goal
        if not weekly_goal:
            return 0

        week_totals = self._week_totals(user_id, today, lambda log: log.total_points)
        return self._count_week_streak(week_totals, today, lambda total: total >= weekly_goal)

    def get_no_penalty_streak(self, user_id: str, today: date) -> int:
        """Consecutive logged weeks, most recent first, without any penalty points"""
        week_penalties = self._week_totals(user_id, today, lambda log: abs(log.penalty_points or 0))
        return self._count_week_streak(week_penalties, today, lambda penalties: penalties == 0)

    def get_streaks(self, user_id: str, today: Optional[date] = None) -> StreaksResponse:
        """All four streaks for a user"""
        today = today or self.date_service.now().date()
        return StreaksResponse(
            logging_streak=self.get_logging_streak(user_id, today),
            daily_goal_streak=self.get_daily_goal_streak(user_id, today),
            weekly_goal_streak=self.get_weekly_goal_streak(user_id, today),
            no_penalty_streak=self.get_no_penalty_streak(user_id, today)
        )

    @staticmethod
    def _is_current_day(logs: List[DailyLog], today: date) -> bool:
        return bool(logs) and logs[0].date in (today, today - timedelta(days=1))

    def _week_totals(self, user_id: str, today: date, value) -> List[Tuple[date, int]]:
        """Per-week sums of value(log), newest week first"""
        since = today - timedelta(days=STREAK_LOOKBACK_DAYS)
        totals: Dict[date, int] = {}
        for log in self.log_repo.get_recent(self.db, user_id, since):
            week_start = self.date_service.week_start_date(log.date)
            totals[week_start] = totals.get(week_start, 0) + value(log)
        return sorted(totals.items(), key=lambda item: item[0], reverse=True)

    def _count_week_streak(self, week_totals: List[Tuple[date, int]], today: date, qualifies) -> int:
        if not week_totals:
            return 0

        current_week = self.date_service.week_start_date(today)
        last_week = current_week - timedelta(days=7)
        if week_totals[0][0] not in (current_week, last_week):
            return 0

        streak = 0
        for index, (week_start, total) in enumerate(week_totals):
            if index > 0 and (week_totals[index - 1][0] - week_start).days != 7:
                break
            if not qualifies(total):
                break
            streak += 1
        return streak

    # ===== MILESTONE AWARDING =====

    def _award_milestones(
        self,
        user_id: str,
        streak: int,
        milestones: Sequence[Tuple[int, str]],
        now: datetime
    ) -> List[FpAwardResult]:
        results = []
        for threshold, event_type in milestones:
            if streak < threshold:
                continue
            if get_fp_rule(event_type).window_policy == WINDOW_ONCE and self.fp_service.has_received(user_id, event_type):
                continue
            result = self.fp_service.award_fp(user_id, event_type, check_duplicate=True, now=now)
            if result.success:
                results.append(result)
        return results

    def award_logging_streak_milestones(self, user_id: str, now: Optional[datetime] = None) -> List[FpAwardResult]:
        now = now or self.date_service.now()
        streak = self.get_logging_streak(user_id, now.date())
        return self._award_milestones(user_id, streak, LOGGING_STREAK_MILESTONES, now)

    def award_daily_goal_streak_milestones(self, user_id: str, now: Optional[datetime] = None) -> List[FpAwardResult]:
        now = now or self.date_service.now()
        streak = self.get_daily_goal_streak(user_id, now.date())
        return self._award_milestones(user_id, streak, DAILY_GOAL_STREAK_MILESTONES, now)

    def award_weekly_goal_streak_milestones(self, user_id: str, now: Optional[datetime] = None) -> List[FpAwardResult]:
        now = now or self.date_service.now()
        streak = self.get_weekly_goal_streak(user_id, now.date())
        return self._award_milestones(user_id, streak, WEEKLY_GOAL_STREAK_MILESTONES, now)

    def award_no_penalty_streak_milestones(self, user_id: str, now: Optional[datetime] = None) -> List[FpAwardResult]:
        now = now or self.date_service.now()
        streak = self.get_no_penalty_streak(user_id, now.date())
        return self._award_milestones(user_id, streak, NO_PENALTY_STREAK_MILESTONES, now)

    def check_weekly_triggers(
        self,
        user_id: str,
        weekly_total: int,
        weekly_goal: int,
        now: Optional[datetime] = None
    ) -> List[FpAwardResult]:
        """
        Award weekly-goal events.

        Meeting the goal awards hit_weekly_goal plus weekly streak milestones;
        otherwise reaching 95% of a positive goal awards within_5_percent_weekly.
        No-penalty milestones are only checked on Mondays, after the previous
        week has closed.
        """
        now = now or self.date_service.now()
        results = []

        if weekly_total >= weekly_goal:
            hit = self.fp_service.award_fp(user_id, "hit_weekly_goal", check_duplicate=True, now=now)
            if hit.success:
                results.append(hit)
            results.extend(self.award_weekly_goal_streak_milestones(user_id, now))
        elif weekly_goal > 0 and weekly_total >= weekly_goal * WITHIN_WEEKLY_GOAL_RATIO:
            within = self.fp_service.award_fp(user_id, "within_5_percent_weekly", check_duplicate=True, now=now)
            if within.success:
                results.append(within)

        if now.isoweekday() == 1:
            results.extend(self.award_no_penalty_streak_milestones(user_id, now))

        return results

    # ===== DAY LOGGING =====

    def log_day(
        self,
        user_id: str,
        data: DailyLogCreate,
        now: Optional[datetime] = None
    ) -> Tuple[DailyLog, List[FpAwardResult]]:
        """
        Save a day's points and award every FP event the log triggers.

        Only a log for the current day triggers awards; backfilled days are
        saved without any. Award failures are logged and never block the day
        from being saved.

        Raises:
            UserNotFoundException: If the user does not exist
        """
        if self.user_repo.get_by_id(self.db, user_id) is None:
            raise UserNotFoundException(user_id)

        now = now or self.date_service.now()

        log = self.log_repo.get_by_date(self.db, user_id, data.date)
        if log is None:
            log = DailyLog(user_id=user_id, date=data.date)
        log.task_points = data.task_points
        log.todo_points = data.todo_points
        log.penalty_points = data.penalty_points
        log.note = data.note
        log = self.log_repo.save(self.db, log)

        if data.date != now.date():
            logger.info(f"Saved backfilled log for {user_id} on {data.date}; no FP awarded")
            return log, []

        settings = self.settings_repo.get(self.db, user_id)
        awards: List[FpAwardResult] = []

        day_award = self.fp_service.award_fp(user_id, "log_day", check_duplicate=True, now=now)
        awards.append(day_award)

        if settings.daily_goal and log.total_points >= settings.daily_goal:
            awards.append(self.fp_service.award_fp(user_id, "hit_daily_goal", check_duplicate=True, now=now))

        awards.extend(self.award_logging_streak_milestones(user_id, now))
        awards.extend(self.award_daily_goal_streak_milestones(user_id, now))

        if settings.weekly_goal:
            week_start = self.date_service.week_start_date(now.date())
            weekly_total = sum(
                entry.total_points
                for entry in self.log_repo.get_range(self.db, user_id, week_start, now.date())
            )
            awards.extend(self.check_weekly_triggers(user_id, weekly_total, settings.weekly_goal, now))

        for award in awards:
            if not award.success:
                logger.info(f"FP not awarded to {user_id}: {award.message}")

        return log, [award for award in awards if award.success]
