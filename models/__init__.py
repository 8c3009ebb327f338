"""Database initialization and model exports."""

from datetime import UTC, datetime

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime, as stored in the database."""

    return datetime.now(UTC).replace(tzinfo=None)


# Import models to register them with SQLAlchemy metadata.
from .user import User, UserContribution  # noqa: E402,F401
from .verification_request import VerificationRequest  # noqa: E402,F401
from .stored_file import StoredFile  # noqa: E402,F401
from .blog_post import BlogPost  # noqa: E402,F401

__all__ = [
    "db",
    "utcnow",
    "User",
    "UserContribution",
    "VerificationRequest",
    "StoredFile",
    "BlogPost",
]
