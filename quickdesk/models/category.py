"""ORM model for ticket categories."""

from sqlalchemy import Column, DateTime, Index, Integer, String, func

from quickdesk.models.base import Base, utcnow


class Category(Base):
    """Ticket category; name is unique case-insensitively."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    description = Column(String(200), nullable=False, default="")
    color = Column(String(7), nullable=False, default="#1976d2")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


Index("ix_categories_name_lower", func.lower(Category.name), unique=True)
