"""
Application constants and environment-driven configuration.
"""
import os

# ===== CONFIGURATION (environment) =====

DATABASE_URL = os.getenv("FRISFOCUS_DATABASE_URL", "sqlite:///./frisfocus.db")
API_KEY = os.getenv("FRISFOCUS_API_KEY", "your-secret-key-change-me")

DEFAULT_LOG_DIRECTORY_PROD = "/var/log/frisfocus"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "FRISFOCUS_CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000"
    ).split(",")
    if origin.strip()
]

RECONCILE_ENABLED = os.getenv("FRISFOCUS_RECONCILE_ENABLED", "false").lower() == "true"
RECONCILE_CRON_HOUR = int(os.getenv("FRISFOCUS_RECONCILE_CRON_HOUR", "3"))

# ===== WINDOW POLICIES =====

WINDOW_NONE = "none"
WINDOW_DAILY = "daily"
WINDOW_WEEKLY = "weekly"
WINDOW_ONCE = "once"

# ===== LEADERBOARD =====

SCOPE_ALL = "all"
SCOPE_FRIENDS = "friends"
LEADERBOARD_SCOPES = (SCOPE_ALL, SCOPE_FRIENDS)

PERIOD_ALL_TIME = "allTime"
PERIOD_WEEKLY = "weekly"
PERIOD_MONTHLY = "monthly"
LEADERBOARD_PERIODS = (PERIOD_ALL_TIME, PERIOD_WEEKLY, PERIOD_MONTHLY)

DEFAULT_LEADERBOARD_LIMIT = 20
MAX_LEADERBOARD_LIMIT = 100

# ===== ACTIVITY LOG =====

DEFAULT_ACTIVITY_LIMIT = 50
MAX_ACTIVITY_LIMIT = 200

# ===== FRIENDSHIPS =====

FRIENDSHIP_PENDING = "pending"
FRIENDSHIP_ACCEPTED = "accepted"
FRIENDSHIP_DECLINED = "declined"

# ===== DUE DATES =====

DUE_STATUS_PENDING = "pending"
DUE_STATUS_COMPLETED = "completed"
DUE_STATUS_MISSED = "missed"

COMPLETED_PURGE_DAYS = 14  # Completed items vanish from the working set after this
URGENT_DAYS_THRESHOLD = 2  # Pending items due within this many days are urgent

# ===== BOOSTERS =====

BOOSTER_PERIOD_WEEK = "week"

# ===== STREAKS =====

STREAK_LOOKBACK_DAYS = 210  # ~30 weeks of daily logs for weekly streaks
WITHIN_WEEKLY_GOAL_RATIO = 0.95

# (threshold, event_type) pairs, ascending
LOGGING_STREAK_MILESTONES = [
    (7, "logging_streak_7"),
    (14, "logging_streak_14"),
    (21, "logging_streak_21"),
    (28, "logging_streak_28"),
    (50, "logging_streak_50"),
    (100, "logging_streak_100"),
    (200, "logging_streak_200"),
    (365, "logging_streak_365"),
]

DAILY_GOAL_STREAK_MILESTONES = [
    (3, "daily_goal_streak_3"),
    (7, "daily_goal_streak_7"),
    (10, "daily_goal_streak_10"),
    (14, "daily_goal_streak_14"),
    (21, "daily_goal_streak_21"),
    (30, "daily_goal_streak_30"),
]

WEEKLY_GOAL_STREAK_MILESTONES = [
    (2, "weekly_goal_streak_2"),
    (3, "weekly_goal_streak_3"),
    (4, "weekly_goal_streak_4"),
    (5, "weekly_goal_streak_5"),
    (6, "weekly_goal_streak_6"),
    (7, "weekly_goal_streak_7"),
    (8, "weekly_goal_streak_8"),
    (10, "weekly_goal_streak_10"),
    (15, "weekly_goal_streak_15"),
    (20, "weekly_goal_streak_20"),
]

NO_PENALTY_STREAK_MILESTONES = [
    (1, "no_penalties_week"),
    (2, "no_penalty_streak_2_weeks"),
    (4, "no_penalty_streak_4_weeks"),
    (6, "no_penalty_streak_6_weeks"),
]
