"""
Leaderboard service.
Ranks users by lifetime FP total or by FP earned in the current week/month.
"""
import logging
from datetime import datetime
from typing import Optional, List
from sqlalchemy.orm import Session

from backend.repositories.fp_repository import FpActivityLogRepository, UserRepository
from backend.repositories.friendship_repository import FriendshipRepository
from backend.services.date_service import DateService
from backend.exceptions import ValidationException
from backend.schemas import LeaderboardEntry
from backend.constants import (
    SCOPE_FRIENDS,
    LEADERBOARD_SCOPES,
    PERIOD_ALL_TIME,
    PERIOD_WEEKLY,
    LEADERBOARD_PERIODS,
    DEFAULT_LEADERBOARD_LIMIT,
)

logger = logging.getLogger("frisfocus.leaderboard")


class LeaderboardService:
    """Service for building FP leaderboards"""

    def __init__(self, db: Session):
        self.db = db
        self.log_repo = FpActivityLogRepository()
        self.user_repo = UserRepository()
        self.friendship_repo = FriendshipRepository()
        self.date_service = DateService()

    def get_leaderboard(
        self,
        scope: str,
        user_id: Optional[str] = None,
        limit: int = DEFAULT_LEADERBOARD_LIMIT,
        period: str = PERIOD_ALL_TIME,
        now: Optional[datetime] = None
    ) -> List[LeaderboardEntry]:
        """
        Build ranked standings.

        Args:
            scope: "all" or "friends" (caller plus accepted friends)
            user_id: Caller, required for the friends scope to take effect
            limit: Maximum entries returned
            period: "allTime" (stored totals), "weekly" or "monthly" (log sums)
            now: Reference time for period windows

        Returns:
            Entries ordered by FP desc with 1-based rank

        Raises:
            ValidationException: On unknown scope or period
        """
        if scope not in LEADERBOARD_SCOPES:
            raise ValidationException("scope", f"must be one of {', '.join(LEADERBOARD_SCOPES)}")
        if period not in LEADERBOARD_PERIODS:
            raise ValidationException("period", f"must be one of {', '.join(LEADERBOARD_PERIODS)}")
        if limit < 1:
            raise ValidationException("limit", "must be at least 1")

        user_ids = self._resolve_user_ids(scope, user_id)

        if period == PERIOD_ALL_TIME:
            return self._all_time(user_ids, limit)
        return self._for_period(user_ids, limit, period, now)

    def _resolve_user_ids(self, scope: str, user_id: Optional[str]) -> Optional[List[str]]:
        """None means every user"""
        if scope != SCOPE_FRIENDS or not user_id:
            return None
        return [user_id] + self.friendship_repo.get_friend_ids(self.db, user_id)

    def _all_time(self, user_ids: Optional[List[str]], limit: int) -> List[LeaderboardEntry]:
        users = self.user_repo.top_by_total(self.db, user_ids, limit)
        return [
            LeaderboardEntry(
                user_id=user.id,
                display_name=user.display_name,
                first_name=user.first_name,
                last_name=user.last_name,
                profile_image_url=user.profile_image_url,
                fp_total=user.fp_total or 0,
                rank=index + 1
            )
            for index, user in enumerate(users)
        ]

    def _for_period(
        self,
        user_ids: Optional[List[str]],
        limit: int,
        period: str,
        now: Optional[datetime]
    ) -> List[LeaderboardEntry]:
        if period == PERIOD_WEEKLY:
            since = self.date_service.start_of_week(now)
        else:
            since = self.date_service.start_of_month(now)

        totals = self.log_repo.period_totals(self.db, since, user_ids, limit)
        if not totals:
            return []

        users = {
            user.id: user
            for user in self.user_repo.get_by_ids(self.db, [uid for uid, _ in totals])
        }

        entries = []
        for index, (uid, period_fp) in enumerate(totals):
            user = users.get(uid)
            entries.append(LeaderboardEntry(
                user_id=uid,
                display_name=user.display_name if user else None,
                first_name=user.first_name if user else None,
                last_name=user.last_name if user else None,
                profile_image_url=user.profile_image_url if user else None,
                fp_total=period_fp,
                rank=index + 1
            ))

        logger.debug(f"{period} leaderboard since {since.isoformat()}: {len(entries)} entries")
        return entries
