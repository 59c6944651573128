"""
Date calculation service.
Handles day, ISO week and month window boundaries used for FP windowing and streaks.
"""
from datetime import datetime, timedelta, date
from typing import Optional


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def now() -> datetime:
        """Current local wall-clock time (naive, matches stored created_at)"""
        return datetime.now()

    @staticmethod
    def start_of_day(moment: Optional[datetime] = None) -> datetime:
        """
        Local midnight of the given moment's day.

        Args:
            moment: Reference time (defaults to now)

        Returns:
            Datetime at 00:00 of that day
        """
        moment = moment or DateService.now()
        return datetime.combine(moment.date(), datetime.min.time())

    @staticmethod
    def week_start_date(target: date) -> date:
        """
        Monday of the ISO week containing target.

        Sunday belongs to the week that started 6 days earlier; any other day
        started (isoweekday - 1) days ago.
        """
        weekday = target.isoweekday()  # Mon=1 .. Sun=7
        if weekday == 7:
            return target - timedelta(days=6)
        return target - timedelta(days=weekday - 1)

    @staticmethod
    def start_of_week(moment: Optional[datetime] = None) -> datetime:
        """Monday 00:00 of the ISO week containing moment"""
        moment = moment or DateService.now()
        monday = DateService.week_start_date(moment.date())
        return datetime.combine(monday, datetime.min.time())

    @staticmethod
    def start_of_month(moment: Optional[datetime] = None) -> datetime:
        """First calendar day of moment's month at 00:00"""
        moment = moment or DateService.now()
        return datetime(moment.year, moment.month, 1)

