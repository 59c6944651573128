"""
Booster derivation service.
Decides which boosters are achieved and sums bonus and penalty points.
"""
from datetime import date
from typing import Iterable, List, Tuple

from backend.schemas import Booster, BoosterView, BoosterPanel, BoosterRule
from backend.services.date_service import DateService
from backend.constants import BOOSTER_PERIOD_WEEK


class BoosterService:
    """Service for booster achievement and totals"""

    @staticmethod
    def is_achieved(booster: Booster) -> bool:
        """
        A progress booster is achieved once progress reaches required.
        Other boosters use the supplied flag.
        """
        if booster.progress is not None and booster.required is not None:
            return booster.progress >= booster.required
        return bool(booster.achieved)

    @staticmethod
    def derive_boosters(boosters: List[Booster]) -> BoosterPanel:
        """
        Project boosters into the panel view.

        total_earned sums achieved non-negative boosters; total_penalty sums the
        magnitude of achieved negative ones.
        """
        views = [
            BoosterView(**booster.model_dump(exclude={"achieved"}), achieved=BoosterService.is_achieved(booster))
            for booster in boosters
        ]
        total_earned = sum(view.points for view in views if view.achieved and view.points >= 0)
        total_penalty = sum(abs(view.points) for view in views if view.achieved and view.points < 0)
        return BoosterPanel(boosters=views, total_earned=total_earned, total_penalty=total_penalty)

    @staticmethod
    def progress_from_rule(
        rule: BoosterRule,
        completion_dates: Iterable[date],
        as_of: date
    ) -> Tuple[int, int]:
        """
        Count completions in the rule's current period (ISO week or calendar month).

        Returns:
            Tuple of (progress, required); progress is 0 for disabled rules
        """
        if not rule.enabled:
            return 0, rule.times_required

        if rule.period == BOOSTER_PERIOD_WEEK:
            start = DateService.week_start_date(as_of)
        else:
            start = as_of.replace(day=1)

        progress = sum(1 for completed in completion_dates if start <= completed <= as_of)
        return progress, rule.times_required

    @staticmethod
    def booster_from_rule(
        booster_id: str,
        name: str,
        rule: BoosterRule,
        completion_dates: Iterable[date],
        as_of: date
    ) -> Booster:
        """Build a progress booster for a task's booster rule"""
        progress, required = BoosterService.progress_from_rule(rule, completion_dates, as_of)
        period_label = "week" if rule.period == BOOSTER_PERIOD_WEEK else "month"
        return Booster(
            id=booster_id,
            name=name,
            description=f"{required}x this {period_label}",
            points=rule.bonus_points,
            progress=progress,
            required=required
        )
