"""SQLAlchemy ORM models."""

from quickdesk.models.base import Base
from quickdesk.models.category import Category
from quickdesk.models.comment import Comment
from quickdesk.models.ticket import Ticket
from quickdesk.models.user import User

__all__ = ["Base", "Category", "Comment", "Ticket", "User"]
