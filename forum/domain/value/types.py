"""Value objects for the forum domain."""

from enum import Enum

from pydantic import field_validator

from forum.domain.value.common import RootValueObject


class AccessLevel(str, Enum):
    """Access a user holds on a forum.

    Levels are ordered ADMIN > WRITE > READ on the *same* forum. A grant on
    one forum says nothing about sibling forums; inheritance down the tree is
    handled by the access resolver, not here.
    """

    READ = "read"
    WRITE = "write"
    ADMIN = "admin"

    def satisfies(self, required: "AccessLevel") -> bool:
        """Whether holding this level implies ``required``."""
        if self == required or self == AccessLevel.ADMIN:
            return True
        return self == AccessLevel.WRITE and required == AccessLevel.READ


class ContentType(str, Enum):
    """Kind of attachment."""

    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    AUDIO = "audio"


class StorageMode(str, Enum):
    """Where the bytes of a content item live."""

    EMBEDDED = "embedded"  # bytes kept on the content record
    BLOB = "blob"  # bytes kept by the content store, record holds a ref


class ForumName(RootValueObject[str]):
    """Forum name.

    Surrounding whitespace is stripped. Uniqueness among siblings is
    case-insensitive, so comparisons go through ``key``.
    """

    @field_validator("root")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Strip and validate the name."""
        v = v.strip()
        if not v:
            raise ValueError("Forum name cannot be empty")
        if len(v) > 100:
            raise ValueError("Forum name must be at most 100 characters")
        return v

    @property
    def key(self) -> str:
        """Lowercased form used for sibling uniqueness, matching SQL lower()."""
        return self.root.lower()

    def matches(self, other: "ForumName | str") -> bool:
        """Case-insensitive equality."""
        other_value = other.root if isinstance(other, ForumName) else other.strip()
        return self.key == other_value.lower()


class Username(RootValueObject[str]):
    """Login name of a user, 3-50 characters without whitespace."""

    @field_validator("root")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Validate username format."""
        if len(v) < 3 or len(v) > 50:
            raise ValueError("Username must be 3-50 characters")
        if any(ch.isspace() for ch in v):
            raise ValueError("Username cannot contain whitespace")
        return v
