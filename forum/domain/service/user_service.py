"""User directory service."""

import logfire
from datetime import datetime
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from forum.domain.error import DuplicateResourceError, NotFoundError, ValidationError
from forum.domain.model.user import User
from forum.domain.repository import UserRepository
from forum.domain.value import UserId, Username

from .base import Service


class UserService(Service):
    """Domain service answering who exists and who is active."""

    def __init__(self, user_repository: UserRepository) -> None:
        """Initialize user service.

        Args:
            user_repository: User repository
        """
        self.user_repository = user_repository

    async def exists(self, user_id: UserId) -> bool:
        """Check whether a user exists."""
        return await self.user_repository.find_by_id(user_id) is not None

    async def is_active(self, user_id: UserId) -> bool:
        """Check whether a user exists and is active."""
        user = await self.user_repository.find_by_id(user_id)
        return user is not None and user.active

    async def get_user_by_id(self, user_id: UserId) -> User:
        """Get a user by ID.

        Args:
            user_id: User ID

        Returns:
            The user

        Raises:
            NotFoundError: If no such user exists
        """
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            logfire.warn("User not found", user_id=str(user_id))
            raise NotFoundError("User", str(user_id))
        return user

    async def create_user(
        self,
        username: str,
        email: str | None = None,
        display_name: str | None = None,
    ) -> User:
        """Register a user.

        Args:
            username: Unique login name
            email: Optional email address
            display_name: Optional display name

        Returns:
            Created user

        Raises:
            ValidationError: If the username is malformed
            DuplicateResourceError: If the username is taken
        """
        with logfire.span("user_service.create_user", username=username):
            try:
                name = Username(username)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid username: {username!r}") from e

            if await self.user_repository.find_by_username(name):
                logfire.warn("Username already taken", username=username)
                raise DuplicateResourceError("User", "username", username)

            user = User(
                id=UserId(uuid4()),
                username=name,
                email=email,
                display_name=display_name or username,
                active=True,
                created_at=datetime.now(),
                updated_at=datetime.now(),
            )
            saved = await self.user_repository.save(user)
            logfire.info("User created", user_id=str(saved.id), username=username)
            return saved

    async def deactivate_user(self, user_id: UserId) -> User:
        """Mark a user inactive. Inactive users hold no forum access."""
        with logfire.span("user_service.deactivate_user", user_id=str(user_id)):
            user = await self.get_user_by_id(user_id)
            if not user.active:
                return user
            updated = user.model_copy(
                update={"active": False, "updated_at": datetime.now()}
            )
            saved = await self.user_repository.save(updated)
            logfire.info("User deactivated", user_id=str(user_id))
            return saved
