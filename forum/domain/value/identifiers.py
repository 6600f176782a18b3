"""Strongly typed identifiers for forum entities.

NewType over UUID keeps forum, post and comment ids from being mixed up
at call sites while costing nothing at runtime.
"""

from typing import NewType
from uuid import UUID

UserId = NewType("UserId", UUID)
ForumId = NewType("ForumId", UUID)
AccessGrantId = NewType("AccessGrantId", UUID)
PostId = NewType("PostId", UUID)
CommentId = NewType("CommentId", UUID)
ContentId = NewType("ContentId", UUID)
