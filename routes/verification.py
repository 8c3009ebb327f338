"""Verification blueprint: researchers request and track verification."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from services.verification import get_request_status, submit_request
from utils.identity import require_user
from utils.request_validation import parse_json_request

user_bp = Blueprint("user", __name__)


@user_bp.route("/request-verification", methods=["POST"])
@jwt_required()
def request_verification():
    """Submit a request to become a verified researcher."""

    user = require_user()
    payload = parse_json_request(request)
    verification = submit_request(user, payload)

    return (
        jsonify(
            {
                "message": "Verification request submitted successfully",
                "requestId": verification.id,
            }
        ),
        HTTPStatus.CREATED,
    )


@user_bp.route("/request-verification", methods=["GET"])
@jwt_required()
def verification_status():
    """Return the status of the caller's most recent verification request."""

    user = require_user()
    return jsonify(get_request_status(user))
