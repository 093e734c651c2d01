"""Test suite. Points settings at an in-memory SQLite database before the app is imported."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "quickdesk-test-secret-0123456789abcdef")
os.environ.setdefault("APP_ENV", "dev")
