"""ORM model for ticket comments (append-only)."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Text

from quickdesk.models.base import Base, utcnow


class Comment(Base):
    """
    Comment on a ticket. Never edited or deleted.

    is_status_change marks the audit entries written on status transitions.
    """

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_status_change = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
