from datetime import datetime, UTC
from sqlalchemy.orm import declarative_base

# Shared declarative base for every model
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form SQLite DateTime columns store."""
    return datetime.now(UTC).replace(tzinfo=None)


def today() -> str:
    """Current UTC calendar day as YYYY-MM-DD."""
    return utcnow().strftime("%Y-%m-%d")
