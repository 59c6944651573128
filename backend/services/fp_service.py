"""
Focus Points service.
Awards FP against the rule table, guards against duplicate awards per window,
reads the activity log and reconciles stored totals with the ledger.
"""
import logging
from datetime import datetime
from typing import Optional, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.models import FpActivityLog
from backend.fp_rules import get_fp_rule
from backend.repositories.fp_repository import FpActivityLogRepository, UserRepository
from backend.services.date_service import DateService
from backend.exceptions import UserNotFoundException
from backend.schemas import FpAwardResult, ReconcileResult
from backend.constants import (
    WINDOW_DAILY,
    WINDOW_WEEKLY,
    WINDOW_ONCE,
    DEFAULT_ACTIVITY_LIMIT,
)

logger = logging.getLogger("frisfocus.fp")


class FpService:
    """Service for FP awards and ledger reads"""

    def __init__(self, db: Session):
        self.db = db
        self.log_repo = FpActivityLogRepository()
        self.user_repo = UserRepository()
        self.date_service = DateService()

    def award_fp(
        self,
        user_id: str,
        event_type: str,
        check_duplicate: bool = False,
        resource_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> FpAwardResult:
        """
        Award the fixed FP amount for an event to a user.

        The log insert and the total increment are committed together. Storage
        failures are reported in the result, never raised.

        Args:
            user_id: User receiving the award
            event_type: Rule table key
            check_duplicate: Reject if already awarded within the rule's window
            resource_id: Optional id of the resource that triggered the event
            now: Award time (defaults to now)

        Returns:
            FpAwardResult describing the outcome
        """
        rule = get_fp_rule(event_type)
        if rule is None:
            return FpAwardResult(
                success=False,
                fp_awarded=0,
                new_total=0,
                message=f"Unknown FP event type: {event_type}"
            )

        now = now or self.date_service.now()

        try:
            if check_duplicate and self.is_duplicate(user_id, event_type, resource_id, now=now):
                current_total = self.user_repo.get_total(self.db, user_id) or 0
                return FpAwardResult(
                    success=False,
                    fp_awarded=0,
                    new_total=current_total,
                    message=f"FP already awarded for {event_type}"
                )

            entry = self.log_repo.add(self.db, FpActivityLog(
                user_id=user_id,
                event_type=event_type,
                fp_amount=rule.fp_amount,
                description=rule.description,
                resource_id=resource_id,
                created_at=now
            ))

            if self.user_repo.increment_total(self.db, user_id, rule.fp_amount) == 0:
                raise UserNotFoundException(user_id)

            new_total = self.user_repo.get_total(self.db, user_id) or 0
            activity_log_id = entry.id
            self.db.commit()
        except (SQLAlchemyError, UserNotFoundException) as e:
            self.db.rollback()
            logger.error(f"Error awarding FP for {event_type} to {user_id}: {e}")
            return FpAwardResult(
                success=False,
                fp_awarded=0,
                new_total=0,
                message=f"Failed to award FP: {e}"
            )

        logger.info(f"Awarded {rule.fp_amount} FP to {user_id} for {event_type} (total {new_total})")
        return FpAwardResult(
            success=True,
            fp_awarded=rule.fp_amount,
            new_total=new_total,
            message=rule.description,
            activity_log_id=activity_log_id
        )

    def is_duplicate(
        self,
        user_id: str,
        event_type: str,
        resource_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> bool:
        """
        Check whether this event was already awarded within its rule's window.

        - daily: since local midnight today
        - weekly: since Monday 00:00 of the current ISO week
        - once: ever
        - none: never a duplicate

        resource_id is accepted for callers that track it but is not a dedupe key.
        """
        rule = get_fp_rule(event_type)
        if rule is None:
            return False

        now = now or self.date_service.now()

        if rule.window_policy == WINDOW_DAILY:
            since = self.date_service.start_of_day(now)
        elif rule.window_policy == WINDOW_WEEKLY:
            since = self.date_service.start_of_week(now)
        elif rule.window_policy == WINDOW_ONCE:
            since = None
        else:
            return False

        return self.log_repo.exists(self.db, user_id, event_type, since)

    def has_received(self, user_id: str, event_type: str) -> bool:
        """Whether the user has ever been awarded this event"""
        return self.log_repo.exists(self.db, user_id, event_type)

    def get_total(self, user_id: str) -> int:
        """Get a user's stored FP total (0 for unknown users)"""
        return self.user_repo.get_total(self.db, user_id) or 0

    def get_activity(
        self,
        user_id: str,
        limit: int = DEFAULT_ACTIVITY_LIMIT,
        offset: int = 0
    ) -> List[FpActivityLog]:
        """Get a page of a user's FP history, newest first"""
        return self.log_repo.get_for_user(self.db, user_id, limit, offset)

    def reconcile_total(self, user_id: str) -> ReconcileResult:
        """
        Recompute a user's total from the ledger and repair the stored value.

        Raises:
            UserNotFoundException: If the user does not exist
        """
        stored_total = self.user_repo.get_total(self.db, user_id)
        if stored_total is None:
            raise UserNotFoundException(user_id)

        ledger_total = self.log_repo.sum_for_user(self.db, user_id)
        repaired = stored_total != ledger_total

        if repaired:
            logger.warning(
                f"FP total drift for {user_id}: stored={stored_total}, "
                f"ledger={ledger_total}. Repairing."
            )
            self.user_repo.set_total(self.db, user_id, ledger_total)
            self.db.commit()

        return ReconcileResult(
            user_id=user_id,
            stored_total=stored_total,
            ledger_total=ledger_total,
            repaired=repaired
        )

    def reconcile_all(self) -> List[ReconcileResult]:
        """Reconcile every user; returns only the repaired ones"""
        repaired = []
        for user_id in self.user_repo.get_all_ids(self.db):
            result = self.reconcile_total(user_id)
            if result.repaired:
                repaired.append(result)
        logger.info(f"Reconciliation finished: {len(repaired)} total(s) repaired")
        return repaired
