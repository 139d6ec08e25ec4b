"""ORM model for accounts (auth, RBAC and generation quota)."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, func

from blogai.models.base import Base


class User(Base):
    """
    Account for session-token authentication and role-based access control.

    role: 'admin' or 'user'; subscription: 'free' or 'premium'.
    generations_left never exceeds generations_total and neither goes negative.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("generations_left >= 0", name="ck_users_generations_left_nonneg"),
        CheckConstraint(
            "generations_left <= generations_total",
            name="ck_users_generations_left_le_total",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    avatar = Column(String(1024), nullable=True)
    role = Column(String(32), nullable=False, default="user")
    subscription = Column(String(32), nullable=False, default="free")
    generations_left = Column(Integer, nullable=False, default=0)
    generations_total = Column(Integer, nullable=False, default=0)
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
