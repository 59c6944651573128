"""
Friendship repository - Data access layer for the friendship graph.
"""
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.models import Friendship
from backend.constants import FRIENDSHIP_ACCEPTED


class FriendshipRepository:
    """Repository for Friendship data access"""

    @staticmethod
    def get_by_id(db: Session, friendship_id: int) -> Optional[Friendship]:
        """Get friendship by ID"""
        return db.query(Friendship).filter(Friendship.id == friendship_id).first()

    @staticmethod
    def get_between(db: Session, user_a: str, user_b: str) -> Optional[Friendship]:
        """Get the friendship linking two users in either direction"""
        return db.query(Friendship).filter(
            or_(
                (Friendship.requester_id == user_a) & (Friendship.addressee_id == user_b),
                (Friendship.requester_id == user_b) & (Friendship.addressee_id == user_a),
            )
        ).first()

    @staticmethod
    def get_accepted_for_user(db: Session, user_id: str) -> List[Friendship]:
        """Accepted friendships where the user is requester or addressee"""
        return db.query(Friendship).filter(
            Friendship.status == FRIENDSHIP_ACCEPTED,
            or_(
                Friendship.requester_id == user_id,
                Friendship.addressee_id == user_id
            )
        ).order_by(Friendship.id).all()

    @staticmethod
    def get_friend_ids(db: Session, user_id: str) -> List[str]:
        """IDs on the other side of each accepted friendship"""
        friend_ids = []
        for friendship in FriendshipRepository.get_accepted_for_user(db, user_id):
            if friendship.requester_id == user_id:
                friend_ids.append(friendship.addressee_id)
            else:
                friend_ids.append(friendship.requester_id)
        return friend_ids

    @staticmethod
    def create(db: Session, friendship: Friendship) -> Friendship:
        """Create new friendship request"""
        db.add(friendship)
        db.commit()
        db.refresh(friendship)
        return friendship

    @staticmethod
    def update(db: Session, friendship: Friendship) -> Friendship:
        """Update existing friendship"""
        db.commit()
        db.refresh(friendship)
        return friendship
