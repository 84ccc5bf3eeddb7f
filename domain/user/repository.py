"""
User repository interface
"""
from abc import ABC, abstractmethod
from typing import Optional
from .entity import User


class UserRepository(ABC):
    """User repository: declares what can be done, not how"""

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a user"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Get a user by id"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email"""
        pass

    @abstractmethod
    async def increment_wins(self, user_id: int) -> bool:
        """Atomically add one to the user's win counter; False if the user is gone"""
        pass
