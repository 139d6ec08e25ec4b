"""ORM model for collections and their many-to-many link to posts."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text, func
from sqlalchemy.orm import relationship

from blogai.models.base import Base

post_collections = Table(
    "post_collections",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id"), primary_key=True),
    Column("collection_id", Integer, ForeignKey("collections.id"), primary_key=True),
)


class Collection(Base):
    """Named grouping of posts, owned by one account."""

    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    posts = relationship(
        "Post",
        secondary=post_collections,
        back_populates="collections",
    )
