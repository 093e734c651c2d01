"""
Seed the default ticket categories. Safe to re-run; existing names are skipped.
  python -m quickdesk.scripts.seed_categories
"""
import logging
import sys

from quickdesk.core.database import SessionLocal
from quickdesk.core.logs import configure_logging
from quickdesk.models.base import utcnow
from quickdesk.services.store import SqlStore

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: tuple[tuple[str, str, str], ...] = (
    ("Technical Support", "Hardware and software issues", "#1976d2"),
    ("Account Issues", "Login, password, and account-related problems", "#2e7d32"),
    ("Billing", "Payment and subscription issues", "#ed6c02"),
    ("Feature Request", "Suggestions for new features", "#9c27b0"),
    ("General Inquiry", "General questions and information", "#d32f2f"),
)


def seed(store: SqlStore) -> int:
    """Insert missing default categories; returns how many were created."""
    created = 0
    for name, description, color in DEFAULT_CATEGORIES:
        if store.category_name_taken(name):
            continue
        store.add_category(name=name, description=description, color=color, created_at=utcnow())
        created += 1
    store.commit()
    return created


def main() -> int:
    configure_logging(logging.INFO)
    db = SessionLocal()
    try:
        created = seed(SqlStore(db))
        logger.info("Seeded categories: created=%s", created)
        return 0
    except Exception as e:
        logger.exception("Category seeding failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
