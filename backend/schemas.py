from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import Optional, List


# ===== FP RULES =====

class FpRule(BaseModel):
    event_type: str
    fp_amount: int
    description: str
    window_policy: str = Field(default="none", pattern="^(none|daily|weekly|once)$")

    class Config:
        frozen = True


class FpAwardResult(BaseModel):
    success: bool
    fp_awarded: int = 0
    new_total: int = 0
    message: str
    activity_log_id: Optional[int] = None


# ===== USERS =====

class UserBase(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    profile_image_url: Optional[str] = None


class UserUpsert(UserBase):
    id: str = Field(..., min_length=1, max_length=128)


class UserResponse(UserBase):
    id: str
    fp_total: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


class FpTotalResponse(BaseModel):
    user_id: str
    fp_total: int


class FpActivityResponse(BaseModel):
    id: int
    user_id: str
    event_type: str
    fp_amount: int
    description: str
    resource_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LeaderboardEntry(BaseModel):
    user_id: str
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    fp_total: int = 0
    rank: int


class ReconcileResult(BaseModel):
    user_id: str
    stored_total: int
    ledger_total: int
    repaired: bool


# ===== FRIENDSHIPS =====

class FriendshipCreate(BaseModel):
    requester_id: str = Field(..., min_length=1)
    addressee_id: str = Field(..., min_length=1)


class FriendshipResponse(BaseModel):
    id: int
    requester_id: str
    addressee_id: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


# ===== DAILY LOGS / HABIT SETTINGS =====

class HabitSettingsUpdate(BaseModel):
    daily_goal: Optional[int] = Field(None, ge=1, le=100000)
    weekly_goal: Optional[int] = Field(None, ge=1, le=700000)


class HabitSettingsResponse(HabitSettingsUpdate):
    user_id: str

    class Config:
        from_attributes = True


class DailyLogCreate(BaseModel):
    date: date
    task_points: int = Field(default=0, ge=0)
    todo_points: int = Field(default=0, ge=0)
    penalty_points: int = Field(default=0, le=0)
    note: Optional[str] = Field(None, max_length=2000)


class DailyLogResponse(DailyLogCreate):
    id: int
    user_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class DayLoggedResponse(BaseModel):
    log: DailyLogResponse
    awards: List[FpAwardResult] = []
    fp_total: int


class StreaksResponse(BaseModel):
    logging_streak: int = 0
    daily_goal_streak: int = 0
    weekly_goal_streak: int = 0
    no_penalty_streak: int = 0


# ===== DUE DATES (client-held) =====

class DueDateItem(BaseModel):
    id: str
    title: str = Field(..., min_length=1, max_length=500)
    due_date: date
    point_value: int = Field(default=10, ge=0)
    penalty_value: int = Field(default=10, ge=0)
    status: str = Field(default="pending", pattern="^(pending|completed|missed)$")
    is_recurring: bool = False
    completed_at: Optional[datetime] = None


class DueDateView(DueDateItem):
    days_until: int
    is_urgent: bool = False


class DueDatePanelRequest(BaseModel):
    items: List[DueDateItem] = []
    as_of: Optional[date] = None


class DueDatePanel(BaseModel):
    as_of: date
    upcoming: List[DueDateView] = []
    missed: List[DueDateView] = []
    completed: List[DueDateView] = []
    earned_points: int = 0
    lost_points: int = 0
    net_points: int = 0


# ===== BOOSTERS (client-held) =====

class BoosterRule(BaseModel):
    enabled: bool = True
    times_required: int = Field(..., ge=1)
    period: str = Field(default="week", pattern="^(week|month)$")
    bonus_points: int = Field(..., ge=1)


class Booster(BaseModel):
    id: str
    name: str = ""
    description: str = ""
    points: int
    achieved: Optional[bool] = None
    progress: Optional[int] = Field(None, ge=0)
    required: Optional[int] = Field(None, ge=1)


class BoosterView(Booster):
    achieved: bool


class BoosterPanelRequest(BaseModel):
    boosters: List[Booster] = []


class BoosterPanel(BaseModel):
    boosters: List[BoosterView] = []
    total_earned: int = 0
    total_penalty: int = 0


class NextOccurrenceRequest(BaseModel):
    items: List[DueDateItem] = []
    item_id: str
    next_due_date: Optional[date] = None
