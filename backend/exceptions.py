"""
Custom exceptions for the FrisFocus backend.
Provides specific exception types for better error handling and recovery.
"""


class FrisFocusException(Exception):
    """Base exception for FrisFocus application"""
    pass


class UserNotFoundException(FrisFocusException):
    """Raised when a user is not found"""
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class FriendshipNotFoundException(FrisFocusException):
    """Raised when a friendship is not found"""
    def __init__(self, friendship_id: int):
        self.friendship_id = friendship_id
        super().__init__(f"Friendship with ID {friendship_id} not found")


class ValidationException(FrisFocusException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")
