"""Declarative base shared by every model."""

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how SQLite hands DateTime columns back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
