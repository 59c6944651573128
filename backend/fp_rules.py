"""
Focus Points rule table.
Static mapping from event type to a fixed FP amount, description and window policy.
Changing an entry only affects future awards.
"""
from typing import Dict, Optional

from backend.constants import WINDOW_NONE, WINDOW_DAILY, WINDOW_WEEKLY, WINDOW_ONCE
from backend.schemas import FpRule


def _rule(event_type: str, fp_amount: int, description: str, window_policy: str = WINDOW_NONE) -> FpRule:
    return FpRule(
        event_type=event_type,
        fp_amount=fp_amount,
        description=description,
        window_policy=window_policy,
    )


_RULES = [
    # Social
    _rule("join_circle", 1, "Joined a circle"),
    _rule("send_cheerline", 1, "Sent a cheerline"),
    _rule("add_friend", 1, "Added a friend"),
    _rule("create_circle", 2, "Created a circle"),
    _rule("accept_1v1_challenge", 2, "Accepted a 1v1 challenge"),
    _rule("accept_circle_challenge", 2, "Accepted a circle challenge"),
    _rule("win_1v1_challenge", 10, "Won a 1v1 challenge"),
    _rule("win_circle_challenge", 10, "Won a circle challenge"),
    _rule("earn_badge", 10, "Earned a badge"),
    _rule("earn_circle_award", 10, "Earned a circle award"),
    _rule("earn_circle_badge", 10, "Earned a circle badge"),
    _rule("invite_friend_email", 10, "Invited a friend via email"),
    _rule("challenge_win_streak_3", 20, "3-challenge win streak"),
    _rule("win_streak_1v1_2", 20, "1v1 2-win streak"),
    _rule("circle_win_streak_3", 25, "Circle 3-win streak"),
    _rule("win_streak_1v1_3", 30, "1v1 3-win streak"),
    _rule("circle_win_streak_5", 40, "Circle 5-win streak"),
    _rule("win_streak_1v1_5", 50, "1v1 5-win streak"),
    _rule("win_streak_1v1_10", 80, "1v1 10-win streak"),

    # Daily
    _rule("log_day", 3, "Logged the day", WINDOW_DAILY),
    _rule("hit_daily_goal", 10, "Hit daily point goal", WINDOW_DAILY),

    # Weekly
    _rule("no_penalties_week", 10, "No penalties all week", WINDOW_WEEKLY),
    _rule("within_5_percent_weekly", 15, "Came within 5% of weekly goal", WINDOW_WEEKLY),
    _rule("complete_all_weekly_daily", 20, "Completed all weekly and daily to-dos", WINDOW_WEEKLY),
    _rule("hit_weekly_goal", 40, "Hit weekly point goal", WINDOW_WEEKLY),
    _rule("over_achiever", 10, "Over Achiever: Exceeded weekly goal by 15%", WINDOW_WEEKLY),

    # Streak milestones
    _rule("daily_goal_streak_3", 5, "3-day daily point goal streak", WINDOW_ONCE),
    _rule("daily_goal_streak_7", 10, "7-day daily point goal streak", WINDOW_ONCE),
    _rule("daily_goal_streak_10", 15, "10-day daily point goal streak", WINDOW_ONCE),
    _rule("daily_goal_streak_14", 20, "14-day daily point streak", WINDOW_ONCE),
    _rule("daily_goal_streak_21", 30, "21-day daily streak", WINDOW_ONCE),
    _rule("daily_goal_streak_30", 50, "30-day daily streak", WINDOW_ONCE),
    _rule("logging_streak_7", 5, "7-day logging streak", WINDOW_ONCE),
    _rule("logging_streak_14", 10, "14-day logging streak", WINDOW_ONCE),
    _rule("logging_streak_21", 15, "21-day logging streak", WINDOW_ONCE),
    _rule("logging_streak_28", 20, "28-day logging streak", WINDOW_ONCE),
    _rule("logging_streak_50", 35, "50-day logging streak", WINDOW_ONCE),
    _rule("logging_streak_100", 75, "100-day logging streak", WINDOW_ONCE),
    _rule("logging_streak_200", 100, "200-day logging streak", WINDOW_ONCE),
    _rule("logging_streak_365", 250, "365-day logging streak", WINDOW_ONCE),
    _rule("weekly_goal_streak_2", 10, "2-week point goal streak", WINDOW_ONCE),
    _rule("weekly_goal_streak_3", 20, "3-week point goal streak", WINDOW_ONCE),
    _rule("weekly_goal_streak_4", 30, "4-week point goal streak", WINDOW_ONCE),
    _rule("weekly_goal_streak_5", 40, "5-week point goal streak", WINDOW_ONCE),
    _rule("weekly_goal_streak_6", 50, "6-week point goal streak", WINDOW_ONCE),
    _rule("weekly_goal_streak_7", 60, "7-week point goal streak", WINDOW_ONCE),
    _rule("weekly_goal_streak_8", 80, "8-week point goal streak", WINDOW_ONCE),
    _rule("weekly_goal_streak_10", 100, "10-week point goal streak", WINDOW_ONCE),
    _rule("weekly_goal_streak_15", 150, "15-week point goal streak", WINDOW_ONCE),
    _rule("weekly_goal_streak_20", 250, "20-week point goal streak", WINDOW_ONCE),
    _rule("no_penalty_streak_2_weeks", 25, "2-week no-penalty streak", WINDOW_ONCE),
    _rule("no_penalty_streak_4_weeks", 40, "4-week no-penalty streak", WINDOW_ONCE),
    _rule("no_penalty_streak_6_weeks", 100, "6-week no-penalty streak", WINDOW_ONCE),

    # One-time firsts
    _rule("first_task", 10, "Created your first task", WINDOW_ONCE),
    _rule("first_post", 10, "Posted to the feed for the first time", WINDOW_ONCE),
    _rule("first_journal", 10, "Wrote your first journal entry", WINDOW_ONCE),
    _rule("first_event", 10, "Added your first event", WINDOW_ONCE),
    _rule("first_due_date", 10, "Added your first due date", WINDOW_ONCE),
    _rule("first_milestone", 10, "Created your first milestone", WINDOW_ONCE),
    _rule("first_weekly_todo", 10, "Added your first weekly to-do item", WINDOW_ONCE),
    _rule("first_friend", 10, "Added your first friend", WINDOW_ONCE),
    _rule("first_badge", 10, "Created your first badge", WINDOW_ONCE),
    _rule("first_7_day_streak", 50, "Completed your first 7-day logging streak", WINDOW_ONCE),
    _rule("first_challenge_accepted", 10, "Accepted your first challenge", WINDOW_ONCE),
    _rule("first_cheerline_sent", 10, "Sent your first cheerline", WINDOW_ONCE),
    _rule("first_circle_joined", 10, "Joined your first circle", WINDOW_ONCE),
    _rule("first_circle_created", 10, "Created your first circle", WINDOW_ONCE),
    _rule("task_master", 10, "Task Master: Created 10+ tasks", WINDOW_ONCE),
    _rule("completed_onboarding_tutorial", 50, "Completed the onboarding tutorial", WINDOW_ONCE),
]

FP_RULES: Dict[str, FpRule] = {rule.event_type: rule for rule in _RULES}


def get_fp_rule(event_type: str) -> Optional[FpRule]:
    """Look up the rule for an event type (None if unknown)"""
    return FP_RULES.get(event_type)
