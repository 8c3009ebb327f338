"""Admin blueprint for reviewing researcher verification requests."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from services.authorization import AuthorizationPolicy
from services.verification import list_requests, review_request
from utils.identity import require_user
from utils.request_validation import parse_json_request, parse_positive_int

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/verification-requests", methods=["GET"])
@jwt_required()
def list_verification_requests():
    """Return a page of verification requests, optionally filtered by status."""

    reviewer = require_user()
    page = parse_positive_int(request.args.get("page"), "page", 1)
    limit = parse_positive_int(
        request.args.get("limit"),
        "limit",
        int(current_app.config.get("VERIFICATION_PAGE_SIZE", 50)),
    )

    return jsonify(
        list_requests(
            reviewer,
            status=request.args.get("status") or None,
            page=page,
            limit=limit,
        )
    )


@admin_bp.route("/verification-requests", methods=["POST"])
@jwt_required()
def process_verification_request():
    """Approve or reject a verification request."""

    reviewer = require_user()
    AuthorizationPolicy.from_config().require_admin(reviewer)
    payload = parse_json_request(request)

    verification = review_request(
        reviewer,
        payload.get("requestId"),
        payload.get("action"),
        payload.get("notes"),
    )

    return jsonify(
        {
            "message": f"Verification request {verification.status} successfully",
            "requestId": verification.id,
            "status": verification.status,
        }
    )
