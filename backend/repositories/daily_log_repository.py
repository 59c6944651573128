"""
Daily log repository - Data access layer for DailyLog and HabitSettings models.
Handles all database queries related to logged days and point goals.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from backend.models import DailyLog, HabitSettings


class DailyLogRepository:
    """Repository for DailyLog data access"""

    @staticmethod
    def get_by_date(db: Session, user_id: str, target_date: date) -> Optional[DailyLog]:
        """Get a user's log for a specific date"""
        return db.query(DailyLog).filter(
            DailyLog.user_id == user_id,
            DailyLog.date == target_date
        ).first()

    @staticmethod
    def get_recent(db: Session, user_id: str, since: Optional[date] = None) -> List[DailyLog]:
        """Get a user's logs, newest date first (optionally on/after since)"""
        query = db.query(DailyLog).filter(DailyLog.user_id == user_id)
        if since is not None:
            query = query.filter(DailyLog.date >= since)
        return query.order_by(DailyLog.date.desc()).all()

    @staticmethod
    def get_range(db: Session, user_id: str, start: date, end: date) -> List[DailyLog]:
        """Get a user's logs with start <= date <= end"""
        return db.query(DailyLog).filter(
            DailyLog.user_id == user_id,
            DailyLog.date >= start,
            DailyLog.date <= end
        ).order_by(DailyLog.date).all()

    @staticmethod
    def save(db: Session, log: DailyLog) -> DailyLog:
        """Insert or update a daily log"""
        db.add(log)
        db.commit()
        db.refresh(log)
        return log


class HabitSettingsRepository:
    """Repository for HabitSettings data access"""

    @staticmethod
    def get(db: Session, user_id: str) -> HabitSettings:
        """
        Get a user's habit settings (creates empty settings if not exists).

        Returns:
            HabitSettings object
        """
        settings = db.query(HabitSettings).filter(HabitSettings.user_id == user_id).first()
        if not settings:
            settings = HabitSettings(user_id=user_id)
            db.add(settings)
            db.commit()
            db.refresh(settings)
        return settings

    @staticmethod
    def update(db: Session, settings: HabitSettings) -> HabitSettings:
        """
        Update habit settings.

        Args:
            db: Database session
            settings: HabitSettings object with updated values

        Returns:
            Updated settings
        """
        db.commit()
        db.refresh(settings)
        return settings
