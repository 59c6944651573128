"""
Tests for BoosterService.
"""
from datetime import date

from backend.services.booster_service import BoosterService
from backend.schemas import Booster, BoosterRule


class TestAchievement:
    """Tests for is_achieved / derive_boosters"""

    def test_progress_booster_achieved_at_required(self):
        booster = Booster(id="b1", points=20, progress=3, required=3, achieved=False)
        assert BoosterService.is_achieved(booster) is True

    def test_progress_booster_below_required(self):
        booster = Booster(id="b1", points=20, progress=2, required=3, achieved=True)
        assert BoosterService.is_achieved(booster) is False

    def test_flag_used_without_progress(self):
        assert BoosterService.is_achieved(Booster(id="b1", points=5, achieved=True)) is True
        assert BoosterService.is_achieved(Booster(id="b2", points=5)) is False

    def test_totals_split_bonus_and_penalty(self):
        boosters = [
            Booster(id="a", points=20, progress=3, required=3),
            Booster(id="b", points=10, achieved=True),
            Booster(id="c", points=50, progress=1, required=5),
            Booster(id="d", points=-15, achieved=True),
        ]

        panel = BoosterService.derive_boosters(boosters)

        assert [v.achieved for v in panel.boosters] == [True, True, False, True]
        assert panel.total_earned == 30
        assert panel.total_penalty == 15


class TestRuleProgress:
    """Tests for progress_from_rule / booster_from_rule"""

    def test_weekly_rule_counts_current_iso_week(self):
        rule = BoosterRule(times_required=3, period="week", bonus_points=20)
        completions = [date(2024, 1, 7), date(2024, 1, 8), date(2024, 1, 10), date(2024, 1, 14)]

        # Sunday 2024-01-14 closes the week that started Monday 2024-01-08
        progress, required = BoosterService.progress_from_rule(rule, completions, date(2024, 1, 14))

        assert (progress, required) == (3, 3)

    def test_monthly_rule_counts_calendar_month(self):
        rule = BoosterRule(times_required=10, period="month", bonus_points=50)
        completions = [date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 15)]

        progress, _ = BoosterService.progress_from_rule(rule, completions, date(2024, 2, 20))

        assert progress == 2

    def test_disabled_rule_has_no_progress(self):
        rule = BoosterRule(enabled=False, times_required=2, period="week", bonus_points=5)
        progress, _ = BoosterService.progress_from_rule(rule, [date(2024, 1, 8)], date(2024, 1, 8))
        assert progress == 0

    def test_booster_from_rule(self):
        rule = BoosterRule(times_required=2, period="week", bonus_points=15)

        booster = BoosterService.booster_from_rule(
            "gym-boost", "Gym", rule, [date(2024, 1, 8), date(2024, 1, 9)], date(2024, 1, 9)
        )

        assert booster.points == 15
        assert booster.description == "2x this week"
        assert BoosterService.is_achieved(booster) is True
