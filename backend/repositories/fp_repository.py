"""
FP repository - Data access layer for the FP ledger.
Handles all database queries related to users' FP totals and the activity log.
"""
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from sqlalchemy import func, update
from sqlalchemy.orm import Session

from backend.models import User, FpActivityLog


class FpActivityLogRepository:
    """Repository for FpActivityLog data access"""

    @staticmethod
    def add(db: Session, entry: FpActivityLog) -> FpActivityLog:
        """Stage a new log entry in the current transaction (no commit)"""
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def exists(
        db: Session,
        user_id: str,
        event_type: str,
        since: Optional[datetime] = None
    ) -> bool:
        """Check whether an entry of this type exists for the user (optionally since a moment)"""
        query = db.query(FpActivityLog.id).filter(
            FpActivityLog.user_id == user_id,
            FpActivityLog.event_type == event_type
        )
        if since is not None:
            query = query.filter(FpActivityLog.created_at >= since)
        return query.first() is not None

    @staticmethod
    def get_for_user(db: Session, user_id: str, limit: int, offset: int) -> List[FpActivityLog]:
        """Get a page of a user's entries, newest first"""
        return db.query(FpActivityLog).filter(
            FpActivityLog.user_id == user_id
        ).order_by(
            FpActivityLog.created_at.desc(),
            FpActivityLog.id.desc()
        ).offset(offset).limit(limit).all()

    @staticmethod
    def sum_for_user(db: Session, user_id: str) -> int:
        """Sum of fp_amount over all of a user's entries"""
        total = db.query(
            func.coalesce(func.sum(FpActivityLog.fp_amount), 0)
        ).filter(FpActivityLog.user_id == user_id).scalar()
        return int(total or 0)

    @staticmethod
    def period_totals(
        db: Session,
        since: datetime,
        user_ids: Optional[Sequence[str]],
        limit: int
    ) -> List[Tuple[str, int]]:
        """
        Per-user FP sums for entries created on/after since.

        Users without entries in the window are absent. Ordered by sum desc,
        then user id asc.
        """
        period_fp = func.coalesce(func.sum(FpActivityLog.fp_amount), 0).label("period_fp")
        query = db.query(FpActivityLog.user_id, period_fp).filter(
            FpActivityLog.created_at >= since
        )
        if user_ids is not None:
            query = query.filter(FpActivityLog.user_id.in_(list(user_ids)))
        rows = query.group_by(FpActivityLog.user_id).order_by(
            period_fp.desc(),
            FpActivityLog.user_id.asc()
        ).limit(limit).all()
        return [(row[0], int(row[1])) for row in rows]


class UserRepository:
    """Repository for User data access"""

    @staticmethod
    def get_by_id(db: Session, user_id: str) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_by_ids(db: Session, user_ids: Sequence[str]) -> List[User]:
        """Get users by a list of IDs"""
        if not user_ids:
            return []
        return db.query(User).filter(User.id.in_(list(user_ids))).all()

    @staticmethod
    def get_all_ids(db: Session) -> List[str]:
        """Get every user ID"""
        return [row[0] for row in db.query(User.id).order_by(User.id).all()]

    @staticmethod
    def get_total(db: Session, user_id: str) -> Optional[int]:
        """Stored fp_total (None if the user does not exist)"""
        row = db.query(User.fp_total).filter(User.id == user_id).first()
        if row is None:
            return None
        return row[0] or 0

    @staticmethod
    def increment_total(db: Session, user_id: str, amount: int) -> int:
        """
        Atomically add amount to the user's fp_total at the storage layer.

        Returns:
            Number of rows updated (0 if the user does not exist)
        """
        result = db.execute(
            update(User)
            .where(User.id == user_id)
            .values(
                fp_total=func.coalesce(User.fp_total, 0) + amount,
                updated_at=datetime.now()
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    @staticmethod
    def set_total(db: Session, user_id: str, total: int) -> None:
        """Overwrite fp_total (reconciliation only)"""
        db.execute(
            update(User)
            .where(User.id == user_id)
            .values(fp_total=total, updated_at=datetime.now())
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def top_by_total(db: Session, user_ids: Optional[Sequence[str]], limit: int) -> List[User]:
        """Users ordered by fp_total desc, then id asc"""
        query = db.query(User)
        if user_ids is not None:
            query = query.filter(User.id.in_(list(user_ids)))
        return query.order_by(
            func.coalesce(User.fp_total, 0).desc(),
            User.id.asc()
        ).limit(limit).all()

    @staticmethod
    def create(db: Session, user: User) -> User:
        """Create new user"""
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update(db: Session, user: User) -> User:
        """Update existing user"""
        db.commit()
        db.refresh(user)
        return user
