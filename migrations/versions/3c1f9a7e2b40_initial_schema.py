"""initial_schema

Create the forum engine schema:
- Users
- Forums (tree via parent_id)
- Forum access grants (one per user and forum)
- Posts and threaded comments
- Contents (files attached to a post or a comment)

Revision ID: 3c1f9a7e2b40
Revises:
Create Date: 2026-10-19 10:12:44.318204

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c1f9a7e2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=sa.text("NOW()"),
    )


def _id() -> sa.Column:
    return sa.Column(
        "id",
        sa.UUID(),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade schema."""
    # Create ENUM types (idempotent)
    op.execute("""
        DO $$ BEGIN
            CREATE TYPE access_level AS ENUM ('read', 'write', 'admin');
        EXCEPTION
            WHEN duplicate_object THEN null;
        END $$;
    """)

    op.execute("""
        DO $$ BEGIN
            CREATE TYPE content_type AS ENUM ('image', 'video', 'document', 'audio');
        EXCEPTION
            WHEN duplicate_object THEN null;
        END $$;
    """)

    op.execute("""
        DO $$ BEGIN
            CREATE TYPE storage_mode AS ENUM ('embedded', 'blob');
        EXCEPTION
            WHEN duplicate_object THEN null;
        END $$;
    """)

    # ========================================================================
    # USERS table
    # ========================================================================
    op.create_table(
        "users",
        _id(),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default="true"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.execute("CREATE UNIQUE INDEX idx_users_username_lower ON users (lower(username))")

    # ========================================================================
    # FORUMS table
    # ========================================================================
    op.create_table(
        "forums",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("parent_id", sa.UUID(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["parent_id"], ["forums.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "parent_id IS NULL OR parent_id <> id", name="forum_not_own_parent"
        ),
    )
    op.create_index("idx_forums_parent_id", "forums", ["parent_id"])
    op.execute(
        "CREATE INDEX idx_forums_parent_name ON forums (parent_id, lower(name))"
    )

    # ========================================================================
    # FORUM_ACCESS table
    # ========================================================================
    op.create_table(
        "forum_access",
        _id(),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("forum_id", sa.UUID(), nullable=False),
        sa.Column(
            "level",
            postgresql.ENUM(
                "read", "write", "admin", name="access_level", create_type=False
            ),
            nullable=False,
        ),
        _timestamp("granted_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["forum_id"], ["forums.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "forum_id", name="uq_forum_access_user_forum"),
    )
    op.create_index("idx_forum_access_forum_id", "forum_access", ["forum_id"])
    op.create_index("idx_forum_access_user_id", "forum_access", ["user_id"])

    # ========================================================================
    # POSTS table
    # ========================================================================
    op.create_table(
        "posts",
        _id(),
        sa.Column("forum_id", sa.UUID(), nullable=False),
        sa.Column("author_id", sa.UUID(), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["forum_id"], ["forums.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.execute(
        "CREATE INDEX idx_posts_forum_id_created_at ON posts (forum_id, created_at DESC)"
    )
    op.create_index("idx_posts_author_id", "posts", ["author_id"])

    # ========================================================================
    # COMMENTS table (replies reference their parent comment)
    # ========================================================================
    op.create_table(
        "comments",
        _id(),
        sa.Column("post_id", sa.UUID(), nullable=False),
        sa.Column("parent_id", sa.UUID(), nullable=True),
        sa.Column("author_id", sa.UUID(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["parent_id"], ["comments.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_comments_post_id", "comments", ["post_id"])
    op.create_index("idx_comments_parent_id", "comments", ["parent_id"])
    op.create_index("idx_comments_created_at", "comments", ["created_at"])

    # ========================================================================
    # CONTENTS table
    # ========================================================================
    op.create_table(
        "contents",
        _id(),
        sa.Column("post_id", sa.UUID(), nullable=True),
        sa.Column("comment_id", sa.UUID(), nullable=True),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "content_type",
            postgresql.ENUM(
                "image",
                "video",
                "document",
                "audio",
                name="content_type",
                create_type=False,
            ),
            nullable=False,
        ),
        sa.Column(
            "storage_mode",
            postgresql.ENUM("embedded", "blob", name="storage_mode", create_type=False),
            nullable=False,
        ),
        sa.Column("storage_ref", sa.String(512), nullable=False),
        sa.Column("data", sa.LargeBinary(), nullable=True),
        sa.Column("size", sa.BigInteger(), nullable=False, server_default="0"),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["comment_id"], ["comments.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "(post_id IS NULL) <> (comment_id IS NULL)", name="content_single_owner"
        ),
        sa.CheckConstraint(
            "(storage_mode = 'embedded') = (data IS NOT NULL)",
            name="content_data_matches_mode",
        ),
    )
    op.create_index("idx_contents_post_id", "contents", ["post_id"])
    op.create_index("idx_contents_comment_id", "contents", ["comment_id"])


def downgrade() -> None:
    """Downgrade schema."""
    # Drop tables (in reverse order of dependencies)
    op.drop_table("contents")
    op.drop_table("comments")
    op.drop_table("posts")
    op.drop_table("forum_access")
    op.drop_table("forums")
    op.drop_table("users")

    # Drop ENUM types
    op.execute("DROP TYPE IF EXISTS storage_mode")
    op.execute("DROP TYPE IF EXISTS content_type")
    op.execute("DROP TYPE IF EXISTS access_level")
