"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import Column, DateTime, Integer, String

from quickdesk.models.base import Base, utcnow


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'user', 'agent' or 'admin'. email is stored lower-cased.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user", index=True)
    avatar = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True)
