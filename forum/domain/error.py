"""Domain layer errors.

Every refusal the engine produces is one of these, so callers can map the
class to a status code without parsing messages:

- NotFoundError: a referenced record does not exist
- AccessDeniedError: the acting user lacks the required level
- BadRequestError: invalid input (ValidationError) or an operation that
  would break a structural rule (BusinessRuleViolationError)
- ConflictError: duplicate sibling name (DuplicateResourceError) or removal
  of a forum's last administrator (LastAdminError)
- StorageError: a content blob could not be written, read or removed
"""


class DomainError(Exception):
    """Base domain error."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class AccessDeniedError(DomainError):
    """Raised when a user lacks the access an operation requires."""

    def __init__(self, action: str, resource: str, user_id: str):
        self.action = action
        self.resource = resource
        self.user_id = user_id
        super().__init__(
            f"User {user_id} does not have permission to {action} {resource}"
        )


class BadRequestError(DomainError):
    """Base for invalid requests."""

    pass


class ValidationError(BadRequestError):
    """Input failed validation (empty name, empty body, bad file)."""

    pass


class BusinessRuleViolationError(BadRequestError):
    """Operation would violate a structural rule of the forum tree."""

    pass


class ConflictError(DomainError):
    """Base for operations conflicting with existing state."""

    pass


class DuplicateResourceError(ConflictError):
    """Raised when a uniquely named resource already exists."""

    def __init__(self, resource: str, field: str, value: str):
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f"{resource} already exists with {field}: {value}")


class LastAdminError(ConflictError):
    """Raised when a change would leave a forum without an administrator."""

    def __init__(self, forum_id: str):
        self.forum_id = forum_id
        super().__init__(f"Cannot remove the last administrator of forum {forum_id}")


class StorageError(DomainError):
    """Raised when a content blob cannot be stored, fetched or deleted."""

    pass
