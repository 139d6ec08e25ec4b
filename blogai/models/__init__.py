"""SQLAlchemy ORM models."""

from blogai.models.base import Base
from blogai.models.collection import Collection, post_collections
from blogai.models.post import Post, SavedPost
from blogai.models.user import User

__all__ = ["Base", "Collection", "Post", "SavedPost", "User", "post_collections"]
