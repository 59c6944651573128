"""
Due-date derivation service.
Pure projections over client-held due-date items: missed status, purge window,
urgency and point totals. Transitions return new lists and never mutate input.
"""
from datetime import datetime, date, timedelta
from typing import List, Optional
from uuid import uuid4

from backend.schemas import DueDateItem, DueDateView, DueDatePanel
from backend.exceptions import ValidationException
from backend.constants import (
    DUE_STATUS_PENDING,
    DUE_STATUS_COMPLETED,
    DUE_STATUS_MISSED,
    COMPLETED_PURGE_DAYS,
    URGENT_DAYS_THRESHOLD,
)


class DueDateService:
    """Service for due-date item projections and transitions"""

    @staticmethod
    def derive_status(item: DueDateItem, as_of: date) -> str:
        """Pending items past their due date display as missed"""
        if item.status == DUE_STATUS_PENDING and item.due_date < as_of:
            return DUE_STATUS_MISSED
        return item.status

    @staticmethod
    def is_purged(item: DueDateItem, as_of: date) -> bool:
        """Completed items drop out of the working set 14 days after completion"""
        if item.status != DUE_STATUS_COMPLETED or item.completed_at is None:
            return False
        return (as_of - item.completed_at.date()).days >= COMPLETED_PURGE_DAYS

    @staticmethod
    def days_until(item: DueDateItem, as_of: date) -> int:
        """Whole days from as_of to the due date (negative when overdue)"""
        return (item.due_date - as_of).days

    @staticmethod
    def derive_due_dates(items: List[DueDateItem], as_of: date) -> DueDatePanel:
        """
        Project stored items into the panel shown for as_of.

        Args:
            items: Items as persisted by the client
            as_of: The day to render for

        Returns:
            DueDatePanel grouped into upcoming, missed and completed with totals
        """
        panel = DueDatePanel(as_of=as_of)

        for item in items:
            if DueDateService.is_purged(item, as_of):
                continue

            status = DueDateService.derive_status(item, as_of)
            days_until = DueDateService.days_until(item, as_of)
            view = DueDateView(
                **item.model_dump(exclude={"status"}),
                status=status,
                days_until=days_until,
                is_urgent=(
                    status == DUE_STATUS_PENDING
                    and 0 <= days_until <= URGENT_DAYS_THRESHOLD
                )
            )

            if status == DUE_STATUS_PENDING:
                panel.upcoming.append(view)
            elif status == DUE_STATUS_MISSED:
                panel.missed.append(view)
            else:
                panel.completed.append(view)

        panel.earned_points = sum(view.point_value for view in panel.completed)
        panel.lost_points = sum(view.penalty_value for view in panel.missed)
        panel.net_points = panel.earned_points - panel.lost_points
        return panel

    @staticmethod
    def create_item(
        items: List[DueDateItem],
        title: str,
        due_date: date,
        point_value: int = 10,
        penalty_value: int = 10,
        is_recurring: bool = False,
        item_id: Optional[str] = None
    ) -> List[DueDateItem]:
        """Append a new pending item"""
        new_item = DueDateItem(
            id=item_id or f"due-{uuid4().hex}",
            title=title.strip(),
            due_date=due_date,
            point_value=point_value,
            penalty_value=penalty_value,
            status=DUE_STATUS_PENDING,
            is_recurring=is_recurring
        )
        return list(items) + [new_item]

    @staticmethod
    def complete_item(
        items: List[DueDateItem],
        item_id: str,
        completed_at: Optional[datetime] = None
    ) -> List[DueDateItem]:
        """Mark an item completed (late completion of a missed item is allowed)"""
        completed_at = completed_at or datetime.now()
        return [
            item.model_copy(update={"status": DUE_STATUS_COMPLETED, "completed_at": completed_at})
            if item.id == item_id else item
            for item in items
        ]

    @staticmethod
    def uncomplete_item(items: List[DueDateItem], item_id: str) -> List[DueDateItem]:
        """Undo a completion"""
        return [
            item.model_copy(update={"status": DUE_STATUS_PENDING, "completed_at": None})
            if item.id == item_id else item
            for item in items
        ]

    @staticmethod
    def delete_item(items: List[DueDateItem], item_id: str) -> List[DueDateItem]:
        """Remove an item explicitly"""
        return [item for item in items if item.id != item_id]

    @staticmethod
    def schedule_next_occurrence(
        items: List[DueDateItem],
        item_id: str,
        next_due_date: date,
        new_id: Optional[str] = None
    ) -> List[DueDateItem]:
        """
        Spawn the next pending occurrence of a completed recurring item.

        The completed original is kept so it stays visible for its purge window.

        Raises:
            ValidationException: If the item is missing, not recurring or not completed
        """
        source = next((item for item in items if item.id == item_id), None)
        if source is None:
            raise ValidationException("item_id", f"no due-date item {item_id}")
        if not source.is_recurring:
            raise ValidationException("item_id", f"due-date item {item_id} is not recurring")
        if source.status != DUE_STATUS_COMPLETED:
            raise ValidationException("item_id", f"due-date item {item_id} is not completed")

        next_item = source.model_copy(update={
            "id": new_id or f"due-{uuid4().hex}",
            "due_date": next_due_date,
            "status": DUE_STATUS_PENDING,
            "completed_at": None,
        })
        return list(items) + [next_item]

    @staticmethod
    def default_next_due_date(item: DueDateItem) -> date:
        """Suggested next date for a recurring item: one week after the current one"""
        return item.due_date + timedelta(days=7)
