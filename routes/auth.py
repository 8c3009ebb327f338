"""Authentication blueprint providing register and login endpoints."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import create_access_token
from sqlalchemy import func
from werkzeug.exceptions import Conflict, Unauthorized

from errors import InvalidInput
from models import db
from models.user import User
from utils.request_validation import parse_json_request

auth_bp = Blueprint("auth", __name__)


def _normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return str(raw_email or "").strip().lower()


def _find_user_by_email(email: str) -> User | None:
    return User.query.filter(func.lower(User.email) == email).first()


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Register a new user with an email, password and display name.

    Every account starts with the ``user`` role; researcher status comes from
    the verification workflow and admin status from configuration.
    """
    payload = parse_json_request(request)
    email = _normalize_email(payload.get("email"))
    password = str(payload.get("password") or "").strip()
    name = str(payload.get("name") or "").strip()

    if not email or not password:
        raise InvalidInput("Email and password are required.")

    if _find_user_by_email(email) is not None:
        raise Conflict("A user with that email already exists.")

    user = User(email=email, name=name or email.split("@", 1)[0], role="user")
    user.set_password(password)

    db.session.add(user)
    db.session.commit()

    return (
        jsonify(
            {
                "message": "User registered successfully.",
                "user": user.to_dict(),
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a user and return a JWT access token."""
    payload = parse_json_request(request)
    email = _normalize_email(payload.get("email"))
    password = str(payload.get("password") or "").strip()

    if not email or not password:
        raise InvalidInput("Email and password are required.")

    user = _find_user_by_email(email)
    if user is None or not user.check_password(password):
        raise Unauthorized("Invalid email or password.")
    if not user.is_active:
        raise Unauthorized("Account is disabled.")

    token = create_access_token(identity=str(user.id))
    return (
        jsonify({"access_token": token, "user": user.to_dict()}),
        HTTPStatus.OK,
    )
