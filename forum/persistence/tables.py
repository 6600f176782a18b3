"""SQLAlchemy table definitions for the forum engine.

These table definitions are used with SQLAlchemy Core.
They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    LargeBinary,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects import postgresql
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", UUID, primary_key=True, server_default="gen_random_uuid()"),
    Column("username", String(50), nullable=False),
    Column("email", String(255), nullable=True),
    Column("display_name", String(255), nullable=True),
    Column("active", Boolean, nullable=False, server_default="true"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_users_username_lower", func.lower(users_table.c.username), unique=True)

# ============================================================================
# FORUMS TABLE (tree via parent_id)
# ============================================================================
forums_table = Table(
    "forums",
    metadata,
    Column("id", UUID, primary_key=True, server_default="gen_random_uuid()"),
    Column("name", String(100), nullable=False),
    Column("description", Text, nullable=True),
    # No ON DELETE CASCADE: a forum with children must not be deletable
    Column(
        "parent_id", UUID, ForeignKey("forums.id", ondelete="RESTRICT"), nullable=True
    ),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    CheckConstraint("parent_id IS NULL OR parent_id <> id", name="forum_not_own_parent"),
)

Index("idx_forums_parent_id", forums_table.c.parent_id)
Index("idx_forums_parent_name", forums_table.c.parent_id, func.lower(forums_table.c.name))

# ============================================================================
# FORUM_ACCESS TABLE (one grant per user and forum)
# ============================================================================
forum_access_table = Table(
    "forum_access",
    metadata,
    Column("id", UUID, primary_key=True, server_default="gen_random_uuid()"),
    Column("user_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column(
        "forum_id", UUID, ForeignKey("forums.id", ondelete="CASCADE"), nullable=False
    ),
    Column(
        "level",
        postgresql.ENUM(
            "read", "write", "admin", name="access_level", create_type=False
        ),
        nullable=False,
    ),
    Column(
        "granted_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("user_id", "forum_id", name="uq_forum_access_user_forum"),
)

Index("idx_forum_access_forum_id", forum_access_table.c.forum_id)
Index("idx_forum_access_user_id", forum_access_table.c.user_id)

# ============================================================================
# POSTS TABLE
# ============================================================================
posts_table = Table(
    "posts",
    metadata,
    Column("id", UUID, primary_key=True, server_default="gen_random_uuid()"),
    Column(
        "forum_id", UUID, ForeignKey("forums.id", ondelete="RESTRICT"), nullable=False
    ),
    Column(
        "author_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    ),
    Column("title", String(300), nullable=False),
    Column("body", Text, nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_posts_forum_id_created_at", posts_table.c.forum_id, posts_table.c.created_at.desc())
Index("idx_posts_author_id", posts_table.c.author_id)

# ============================================================================
# COMMENTS TABLE
# ============================================================================
comments_table = Table(
    "comments",
    metadata,
    Column("id", UUID, primary_key=True, server_default="gen_random_uuid()"),
    Column(
        "post_id", UUID, ForeignKey("posts.id", ondelete="RESTRICT"), nullable=False
    ),
    # Replies are removed explicitly, deepest first
    Column(
        "parent_id", UUID, ForeignKey("comments.id", ondelete="RESTRICT"), nullable=True
    ),
    Column(
        "author_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    ),
    Column("body", Text, nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_comments_post_id", comments_table.c.post_id)
Index("idx_comments_parent_id", comments_table.c.parent_id)
Index("idx_comments_created_at", comments_table.c.created_at)

# ============================================================================
# CONTENTS TABLE (attachments of a post or a comment)
# ============================================================================
contents_table = Table(
    "contents",
    metadata,
    Column("id", UUID, primary_key=True, server_default="gen_random_uuid()"),
    Column("post_id", UUID, ForeignKey("posts.id", ondelete="RESTRICT"), nullable=True),
    Column(
        "comment_id", UUID, ForeignKey("comments.id", ondelete="RESTRICT"), nullable=True
    ),
    Column("filename", String(255), nullable=False),
    Column("description", Text, nullable=True),
    Column(
        "content_type",
        postgresql.ENUM(
            "image", "video", "document", "audio", name="content_type", create_type=False
        ),
        nullable=False,
    ),
    Column(
        "storage_mode",
        postgresql.ENUM("embedded", "blob", name="storage_mode", create_type=False),
        nullable=False,
    ),
    Column("storage_ref", String(512), nullable=False),
    Column("data", LargeBinary, nullable=True),
    Column("size", BigInteger, nullable=False, server_default="0"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    CheckConstraint(
        "(post_id IS NULL) <> (comment_id IS NULL)",
        name="content_single_owner",
    ),
    CheckConstraint(
        "(storage_mode = 'embedded') = (data IS NOT NULL)",
        name="content_data_matches_mode",
    ),
)

Index("idx_contents_post_id", contents_table.c.post_id)
Index("idx_contents_comment_id", contents_table.c.comment_id)
