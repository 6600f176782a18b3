"""In-memory user repository for testing."""

from typing import Optional

from forum.domain.model.user import User
from forum.domain.repository.user import UserRepository
from forum.domain.value import UserId, Username


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing."""

    def __init__(self) -> None:
        self._users: dict[UserId, User] = {}

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID."""
        return self._users.get(user_id)

    async def find_by_username(self, username: Username) -> Optional[User]:
        """Find a user by username, ignoring case."""
        wanted = username.root.lower()
        for user in self._users.values():
            if user.username.root.lower() == wanted:
                return user
        return None

    async def save(self, user: User) -> User:
        """Save a user."""
        self._users[user.id] = user
        return user
