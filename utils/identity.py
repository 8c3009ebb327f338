"""Resolve the JWT identity of the current request to a user record."""

from __future__ import annotations

from flask_jwt_extended import get_jwt_identity

from errors import NotFound, Unauthenticated
from models import db
from models.user import User


def _current_identity():
    try:
        return get_jwt_identity()
    except RuntimeError:
        return None


def _load_user(identity) -> User | None:
    try:
        user_id = int(identity)
    except (TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


def require_user() -> User:
    """Return the authenticated user, or raise if the token has no live account."""

    identity = _current_identity()
    if identity is None:
        raise Unauthenticated()

    user = _load_user(identity)
    if user is None:
        raise NotFound("User not found.")
    if not user.is_active:
        raise Unauthenticated("Account is disabled.")
    return user
