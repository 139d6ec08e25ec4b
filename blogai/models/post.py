"""ORM models for blog posts and the accounts that saved them."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from blogai.models.base import Base
from blogai.models.collection import post_collections


class Post(Base):
    """
    A blog post or draft owned by exactly one account.

    author_id is set at creation and never reassigned. excerpt and word_count
    are derived from content whenever content changes.
    """

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False, default="")
    excerpt = Column(String(512), nullable=False, default="")
    status = Column(String(16), nullable=False, default="draft", index=True)
    writing_phase = Column(String(64), nullable=True)
    word_count = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    collections = relationship(
        "Collection",
        secondary=post_collections,
        back_populates="posts",
        order_by="Collection.id",
    )


class SavedPost(Base):
    """An account bookmarking a post."""

    __tablename__ = "saved_posts"
    __table_args__ = (UniqueConstraint("user_id", "post_id", name="uq_saved_posts_user_post"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
