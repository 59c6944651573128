from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Index, UniqueConstraint
from datetime import datetime
from backend.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)  # External auth provider uid
    display_name = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)

    # Materialized sum of fp_activity_log.fp_amount for this user
    fp_total = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class FpActivityLog(Base):
    __tablename__ = "fp_activity_log"
    __table_args__ = (
        Index("ix_fp_activity_log_user_created", "user_id", "created_at"),
        Index("ix_fp_activity_log_created", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    event_type = Column(String, nullable=False)
    fp_amount = Column(Integer, nullable=False)
    description = Column(String, nullable=False)  # Rule description at award time
    resource_id = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class Friendship(Base):
    __tablename__ = "friendships"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    addressee_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, default="pending")  # pending, accepted, declined
    created_at = Column(DateTime, default=datetime.now)


class DailyLog(Base):
    __tablename__ = "user_daily_logs"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_user_daily_logs_user_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    task_points = Column(Integer, default=0)
    todo_points = Column(Integer, default=0)
    penalty_points = Column(Integer, default=0)  # Zero or negative

    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now)

    @property
    def total_points(self) -> int:
        return (self.task_points or 0) + (self.todo_points or 0) + (self.penalty_points or 0)


class HabitSettings(Base):
    __tablename__ = "user_habit_settings"

    user_id = Column(String, ForeignKey("users.id"), primary_key=True)
    daily_goal = Column(Integer, nullable=True)
    weekly_goal = Column(Integer, nullable=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
