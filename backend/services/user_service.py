"""
User service.
Profiles, the friendship graph and per-user point goals.
"""
import logging
from typing import List
from sqlalchemy.orm import Session

from backend.models import User, Friendship, HabitSettings
from backend.repositories.fp_repository import UserRepository
from backend.repositories.friendship_repository import FriendshipRepository
from backend.repositories.daily_log_repository import HabitSettingsRepository
from backend.services.fp_service import FpService
from backend.exceptions import (
    UserNotFoundException,
    FriendshipNotFoundException,
    ValidationException,
)
from backend.schemas import UserUpsert, FriendshipCreate, HabitSettingsUpdate
from backend.constants import (
    FRIENDSHIP_PENDING,
    FRIENDSHIP_ACCEPTED,
    FRIENDSHIP_DECLINED,
)

logger = logging.getLogger("frisfocus.users")


class UserService:
    """Service for user profiles and friendships"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository()
        self.friendship_repo = FriendshipRepository()
        self.settings_repo = HabitSettingsRepository()

    def get_user(self, user_id: str) -> User:
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)
        return user

    def upsert_user(self, data: UserUpsert) -> User:
        """Create a profile or update its display fields (fp_total is never touched)"""
        user = self.user_repo.get_by_id(self.db, data.id)
        if user is None:
            logger.info(f"Creating user {data.id}")
            return self.user_repo.create(self.db, User(**data.model_dump(), fp_total=0))

        for field, value in data.model_dump(exclude={"id"}, exclude_unset=True).items():
            setattr(user, field, value)
        return self.user_repo.update(self.db, user)

    def get_friends(self, user_id: str) -> List[User]:
        self.get_user(user_id)
        friend_ids = self.friendship_repo.get_friend_ids(self.db, user_id)
        return sorted(self.user_repo.get_by_ids(self.db, friend_ids), key=lambda u: u.id)

    def request_friendship(self, data: FriendshipCreate) -> Friendship:
        if data.requester_id == data.addressee_id:
            raise ValidationException("addressee_id", "cannot befriend yourself")
        self.get_user(data.requester_id)
        self.get_user(data.addressee_id)

        existing = self.friendship_repo.get_between(self.db, data.requester_id, data.addressee_id)
        if existing and existing.status != FRIENDSHIP_DECLINED:
            raise ValidationException("addressee_id", f"friendship already {existing.status}")
        if existing:
            existing.requester_id = data.requester_id
            existing.addressee_id = data.addressee_id
            existing.status = FRIENDSHIP_PENDING
            return self.friendship_repo.update(self.db, existing)

        return self.friendship_repo.create(self.db, Friendship(
            requester_id=data.requester_id,
            addressee_id=data.addressee_id,
            status=FRIENDSHIP_PENDING
        ))

    def accept_friendship(self, friendship_id: int) -> Friendship:
        """Accept a pending request and award friend FP to both sides"""
        friendship = self._get_pending(friendship_id)
        friendship.status = FRIENDSHIP_ACCEPTED
        friendship = self.friendship_repo.update(self.db, friendship)

        fp_service = FpService(self.db)
        for user_id in (friendship.requester_id, friendship.addressee_id):
            fp_service.award_fp(user_id, "add_friend", resource_id=str(friendship.id))
            fp_service.award_fp(user_id, "first_friend", check_duplicate=True)
        return friendship

    def decline_friendship(self, friendship_id: int) -> Friendship:
        friendship = self._get_pending(friendship_id)
        friendship.status = FRIENDSHIP_DECLINED
        return self.friendship_repo.update(self.db, friendship)

    def _get_pending(self, friendship_id: int) -> Friendship:
        friendship = self.friendship_repo.get_by_id(self.db, friendship_id)
        if not friendship:
            raise FriendshipNotFoundException(friendship_id)
        if friendship.status != FRIENDSHIP_PENDING:
            raise ValidationException("status", f"friendship is {friendship.status}")
        return friendship

    def update_habit_settings(self, user_id: str, data: HabitSettingsUpdate) -> HabitSettings:
        self.get_user(user_id)
        settings = self.settings_repo.get(self.db, user_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(settings, field, value)
        return self.settings_repo.update(self.db, settings)
