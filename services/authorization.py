"""Capability checks for admin-only and researcher-only operations.

Admin capability has two independent sources: a configured allow-list of
email addresses and the ``admin`` role persisted on the user record. Neither
implies the verified-researcher capability, and vice versa.
"""

from __future__ import annotations

from typing import Iterable

from flask import current_app

from errors import Forbidden
from models.user import User


class AuthorizationPolicy:
    """Answer capability questions about a user."""

    def __init__(self, static_admin_emails: Iterable[str] = ()):
        self.static_admin_emails = frozenset(
            email.strip().lower() for email in static_admin_emails if email.strip()
        )

    @classmethod
    def from_config(cls, config=None) -> "AuthorizationPolicy":
        config = config if config is not None else current_app.config
        return cls(config.get("ADMIN_EMAILS") or ())

    def is_allow_listed(self, email: str | None) -> bool:
        return (email or "").strip().lower() in self.static_admin_emails

    def has_admin_role(self, user: User | None) -> bool:
        return user is not None and user.role == "admin"

    def is_admin(self, user: User | None) -> bool:
        if user is None:
            return False
        return self.is_allow_listed(user.email) or self.has_admin_role(user)

    def is_verified_researcher(self, user: User | None) -> bool:
        if user is None:
            return False
        return user.role == "verified_researcher" and bool(user.is_verified)

    def can_write_blog(self, user: User | None) -> bool:
        if user is None:
            return False
        return bool(user.blog_enabled) or self.is_admin(user)

    def require_admin(self, user: User | None) -> User:
        """Return the user if they hold admin capability, else raise Forbidden."""

        if not self.is_admin(user):
            raise Forbidden()
        return user
