from fastapi import FastAPI, Depends, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging
import os
from pathlib import Path

from backend.database import engine, get_db, Base
from backend import models  # noqa: F401  registers all models with Base
from backend.schemas import (
    UserUpsert, UserResponse, FpTotalResponse, FpActivityResponse, FpRule,
    LeaderboardEntry, ReconcileResult,
    FriendshipCreate, FriendshipResponse,
    HabitSettingsUpdate, HabitSettingsResponse,
    DailyLogCreate, DayLoggedResponse, StreaksResponse,
    DueDateItem, DueDatePanelRequest, DueDatePanel, NextOccurrenceRequest,
    BoosterPanelRequest, BoosterPanel,
)
from backend.auth import verify_api_key
from backend.fp_rules import FP_RULES
from backend.exceptions import (
    UserNotFoundException, FriendshipNotFoundException, ValidationException,
)
from backend.services.fp_service import FpService
from backend.services.leaderboard_service import LeaderboardService
from backend.services.streak_service import StreakService
from backend.services.user_service import UserService
from backend.services.due_date_service import DueDateService
from backend.services.booster_service import BoosterService
from backend.services.date_service import DateService
from backend.scheduler import start_scheduler, stop_scheduler
from backend.auto_migrate import auto_migrate
from backend.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV, CORS_ALLOWED_ORIGINS,
    DEFAULT_ACTIVITY_LIMIT, MAX_ACTIVITY_LIMIT,
    DEFAULT_LEADERBOARD_LIMIT, MAX_LEADERBOARD_LIMIT,
    SCOPE_ALL, PERIOD_ALL_TIME,
)

LOG_DIR = os.getenv("FRISFOCUS_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("FRISFOCUS_LOG_FILE", "app.log")

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("frisfocus")

# Create database tables
Base.metadata.create_all(bind=engine)

# Add columns introduced after a database was first created
try:
    auto_migrate()
except Exception as e:
    logger.error(f"Auto-migration failed: {e}")
    # Don't crash the app - continue with existing schema

app = FastAPI(
    title="FrisFocus API",
    description="Focus Points ledger, leaderboards and habit projections",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def startup_event():
    logger.info(f"FrisFocus API started. Logging to: {log_path}")
    start_scheduler()

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down FrisFocus API")
    stop_scheduler()

# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "FrisFocus API", "status": "active"}


# ===== USERS =====

@app.post("/api/users", response_model=UserResponse, dependencies=[Depends(verify_api_key)])
async def upsert_user_endpoint(user: UserUpsert, db: Session = Depends(get_db)):
    """Create or update a user profile"""
    return UserService(db).upsert_user(user)


@app.get("/api/users/{user_id}", response_model=UserResponse, dependencies=[Depends(verify_api_key)])
async def get_user_endpoint(user_id: str, db: Session = Depends(get_db)):
    """Get a user profile"""
    try:
        return UserService(db).get_user(user_id)
    except UserNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.put("/api/users/{user_id}/habit-settings", response_model=HabitSettingsResponse, dependencies=[Depends(verify_api_key)])
async def update_habit_settings_endpoint(user_id: str, settings: HabitSettingsUpdate, db: Session = Depends(get_db)):
    """Update daily/weekly point goals"""
    try:
        return UserService(db).update_habit_settings(user_id, settings)
    except UserNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))


# ===== FP ENDPOINTS =====

@app.get("/api/users/{user_id}/fp", response_model=FpTotalResponse, dependencies=[Depends(verify_api_key)])
async def get_fp_total_endpoint(user_id: str, db: Session = Depends(get_db)):
    """Get current FP total"""
    return {"user_id": user_id, "fp_total": FpService(db).get_total(user_id)}


@app.get("/api/users/{user_id}/fp/activity", response_model=List[FpActivityResponse], dependencies=[Depends(verify_api_key)])
async def get_fp_activity_endpoint(
    user_id: str,
    limit: int = Query(DEFAULT_ACTIVITY_LIMIT, ge=1, le=MAX_ACTIVITY_LIMIT),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Get FP history, newest first"""
    return FpService(db).get_activity(user_id, limit, offset)


@app.post("/api/users/{user_id}/fp/reconcile", response_model=ReconcileResult, dependencies=[Depends(verify_api_key)])
async def reconcile_fp_endpoint(user_id: str, db: Session = Depends(get_db)):
    """Recompute the stored FP total from the activity log"""
    try:
        return FpService(db).reconcile_total(user_id)
    except UserNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/api/fp/rules", response_model=List[FpRule], dependencies=[Depends(verify_api_key)])
async def get_fp_rules_endpoint():
    """List every FP rule"""
    return list(FP_RULES.values())


@app.get("/api/fp/leaderboard", response_model=List[LeaderboardEntry], dependencies=[Depends(verify_api_key)])
async def get_leaderboard_endpoint(
    scope: str = SCOPE_ALL,
    period: str = PERIOD_ALL_TIME,
    limit: int = Query(DEFAULT_LEADERBOARD_LIMIT, ge=1, le=MAX_LEADERBOARD_LIMIT),
    user_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Get ranked FP standings"""
    try:
        return LeaderboardService(db).get_leaderboard(scope, user_id, limit, period)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))


# ===== FRIENDSHIPS =====

@app.post("/api/friendships", response_model=FriendshipResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def request_friendship_endpoint(friendship: FriendshipCreate, db: Session = Depends(get_db)):
    """Send a friend request"""
    try:
        return UserService(db).request_friendship(friendship)
    except UserNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/friendships/{friendship_id}/accept", response_model=FriendshipResponse, dependencies=[Depends(verify_api_key)])
async def accept_friendship_endpoint(friendship_id: int, db: Session = Depends(get_db)):
    """Accept a pending friend request"""
    try:
        return UserService(db).accept_friendship(friendship_id)
    except FriendshipNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/friendships/{friendship_id}/decline", response_model=FriendshipResponse, dependencies=[Depends(verify_api_key)])
async def decline_friendship_endpoint(friendship_id: int, db: Session = Depends(get_db)):
    """Decline a pending friend request"""
    try:
        return UserService(db).decline_friendship(friendship_id)
    except FriendshipNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/users/{user_id}/friends", response_model=List[UserResponse], dependencies=[Depends(verify_api_key)])
async def get_friends_endpoint(user_id: str, db: Session = Depends(get_db)):
    """Get accepted friends"""
    try:
        return UserService(db).get_friends(user_id)
    except UserNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))


# ===== DAILY LOGS / STREAKS =====

@app.post("/api/users/{user_id}/daily-logs", response_model=DayLoggedResponse, dependencies=[Depends(verify_api_key)])
async def log_day_endpoint(user_id: str, log: DailyLogCreate, db: Session = Depends(get_db)):
    """Log a day and award any FP it earns"""
    try:
        saved, awards = StreakService(db).log_day(user_id, log)
    except UserNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {
        "log": saved,
        "awards": awards,
        "fp_total": FpService(db).get_total(user_id)
    }


@app.get("/api/users/{user_id}/streaks", response_model=StreaksResponse, dependencies=[Depends(verify_api_key)])
async def get_streaks_endpoint(user_id: str, db: Session = Depends(get_db)):
    """Get logging, goal and no-penalty streaks"""
    return StreakService(db).get_streaks(user_id)


# ===== DUE DATES / BOOSTERS (pure projections) =====

@app.post("/api/due-dates/panel", response_model=DueDatePanel, dependencies=[Depends(verify_api_key)])
async def due_dates_panel_endpoint(request: DueDatePanelRequest):
    """Derive missed status, urgency and totals for client-held due dates"""
    as_of = request.as_of or DateService.now().date()
    return DueDateService.derive_due_dates(request.items, as_of)


@app.post("/api/due-dates/next-occurrence", response_model=List[DueDateItem], dependencies=[Depends(verify_api_key)])
async def due_dates_next_occurrence_endpoint(request: NextOccurrenceRequest):
    """Spawn the next occurrence of a completed recurring item"""
    source = next((item for item in request.items if item.id == request.item_id), None)
    if source is None:
        raise HTTPException(status_code=404, detail=f"Due-date item {request.item_id} not found")
    next_due_date: date = request.next_due_date or DueDateService.default_next_due_date(source)
    try:
        return DueDateService.schedule_next_occurrence(request.items, request.item_id, next_due_date)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/boosters/panel", response_model=BoosterPanel, dependencies=[Depends(verify_api_key)])
async def boosters_panel_endpoint(request: BoosterPanelRequest):
    """Derive achieved state and totals for boosters"""
    return BoosterService.derive_boosters(request.boosters)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("backend.main:app", host="0.0.0.0", port=8000, reload=False)
