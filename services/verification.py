"""Researcher verification workflow.

A user submits a request, which starts out ``pending``. An administrator
then approves or rejects it; both outcomes are terminal. Approval promotes the
user to ``verified_researcher`` and copies the profile fields from the request.

The status transition is a conditional update on ``status = 'pending'`` and the
user promotion is committed in the same transaction, so two concurrent reviews
cannot both apply and a request is never approved without its user being
promoted.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import (
    DuplicateRequest,
    InvalidInput,
    InvalidTransition,
    NotFound,
    Unauthenticated,
)
from models import db, utcnow
from models.user import User
from models.verification_request import (
    ACTIVE_STATUSES,
    VERIFICATION_STATUSES,
    VerificationRequest,
)
from services.authorization import AuthorizationPolicy
from utils.request_validation import parse_bool

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("researchField", "institution", "position", "motivation")
REVIEW_ACTIONS = {"approve": "approved", "reject": "rejected"}
DEFAULT_PAGE_SIZE = 50

_NEWEST_FIRST = (
    VerificationRequest.date_submitted.desc(),
    VerificationRequest.id.desc(),
)


def _require_identity(user: User | None) -> User:
    if user is None:
        raise Unauthenticated()
    return user


def _clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _parse_publications_count(value: Any) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise InvalidInput("publicationsCount must be a non-negative integer.")
    try:
        count = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput("publicationsCount must be a non-negative integer.") from exc
    if count < 0 or (isinstance(value, float) and not value.is_integer()):
        raise InvalidInput("publicationsCount must be a non-negative integer.")
    return count


def _parse_publication_links(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(link, str) for link in value):
        raise InvalidInput("publicationLinks must be a list of URLs.")
    return [link.strip() for link in value if link.strip()]


def _parse_roadmap_completed(value: Any) -> bool:
    if value is None:
        return False
    parsed = parse_bool(value)
    if parsed is None:
        raise InvalidInput("roadmapCompleted must be a boolean.")
    return parsed


def find_active_request(user_id: int) -> VerificationRequest | None:
    """Return the user's pending or approved request, if any."""

    return (
        VerificationRequest.query.filter(
            VerificationRequest.user_id == user_id,
            VerificationRequest.status.in_(ACTIVE_STATUSES),
        )
        .order_by(*_NEWEST_FIRST)
        .first()
    )


def submit_request(user: User | None, fields: Mapping[str, Any]) -> VerificationRequest:
    """Create a pending verification request for ``user``."""

    user = _require_identity(user)

    cleaned = {key: _clean_text(fields.get(key)) for key in REQUIRED_FIELDS}
    missing = [key for key in REQUIRED_FIELDS if not cleaned[key]]
    if missing:
        raise InvalidInput(
            "Missing required fields.", details=", ".join(missing)
        )

    publications_count = _parse_publications_count(fields.get("publicationsCount"))
    publication_links = _parse_publication_links(fields.get("publicationLinks"))
    roadmap_completed = _parse_roadmap_completed(fields.get("roadmapCompleted"))

    existing = find_active_request(user.id)
    if existing is not None:
        raise DuplicateRequest(existing.status)

    verification = VerificationRequest(
        user_id=user.id,
        user_name=user.name or "",
        user_email=user.email,
        date_submitted=utcnow(),
        research_field=cleaned["researchField"],
        institution=cleaned["institution"],
        position=cleaned["position"],
        publications_count=publications_count,
        motivation=cleaned["motivation"],
        publication_links=publication_links,
        status="pending",
        roadmap_completed=roadmap_completed,
    )
    db.session.add(verification)
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent submission won the race for the active-request slot.
        db.session.rollback()
        existing = find_active_request(user.id)
        raise DuplicateRequest(existing.status if existing else "pending")

    logger.info(
        "Verification request %s submitted by user %s", verification.id, user.id
    )
    return verification


def get_request_status(user: User | None) -> dict:
    """Describe the user's most recently submitted request."""

    user = _require_identity(user)

    latest = (
        VerificationRequest.query.filter_by(user_id=user.id)
        .order_by(*_NEWEST_FIRST)
        .first()
    )
    if latest is None:
        return {"status": "none", "message": "No verification request found"}

    return {
        "status": latest.status,
        "requestId": latest.id,
        "dateSubmitted": latest.date_submitted.isoformat(),
        "reviewDate": latest.review_date.isoformat() if latest.review_date else None,
    }


def _coerce_request_id(request_id: Any) -> int:
    if request_id is None or request_id == "" or isinstance(request_id, bool):
        raise InvalidInput("Invalid request parameters.")
    try:
        return int(request_id)
    except (TypeError, ValueError) as exc:
        raise InvalidInput("Invalid request parameters.") from exc


def review_request(
    reviewer: User | None,
    request_id: Any,
    action: Any,
    notes: str | None = None,
    *,
    policy: AuthorizationPolicy | None = None,
) -> VerificationRequest:
    """Approve or reject a pending verification request."""

    reviewer = _require_identity(reviewer)
    policy = policy or AuthorizationPolicy.from_config()
    policy.require_admin(reviewer)

    if not isinstance(action, str) or action not in REVIEW_ACTIONS:
        raise InvalidInput("Invalid request parameters.")
    if notes is not None and not isinstance(notes, str):
        raise InvalidInput("notes must be a string.")
    request_id = _coerce_request_id(request_id)
    target_status = REVIEW_ACTIONS[action]

    verification = db.session.get(VerificationRequest, request_id)
    if verification is None:
        raise NotFound("Verification request not found.")
    user = db.session.get(User, verification.user_id)
    if user is None:
        raise NotFound("User not found.")

    if verification.status != "pending":
        if verification.status == target_status == "approved":
            return _replay_approval(verification, user)
        raise InvalidTransition(verification.status)

    reviewed_at = utcnow()
    try:
        updated = VerificationRequest.query.filter_by(
            id=verification.id, status="pending"
        ).update(
            {
                "status": target_status,
                "reviewed_by": reviewer.id,
                "review_date": reviewed_at,
                "review_notes": notes or "",
            },
            synchronize_session=False,
        )
        if updated != 1:
            db.session.rollback()
            db.session.refresh(verification)
            raise InvalidTransition(verification.status)

        if target_status == "approved":
            user.promote_to_researcher(verification, reviewed_at)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    db.session.refresh(verification)
    logger.info(
        "Verification request %s %s by user %s",
        verification.id,
        target_status,
        reviewer.id,
    )
    return verification


def _replay_approval(verification: VerificationRequest, user: User) -> VerificationRequest:
    """Re-apply the promotion for a request that is already approved."""

    user.promote_to_researcher(
        verification, verification.review_date or utcnow()
    )
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    logger.info(
        "Re-applied approval of verification request %s to user %s",
        verification.id,
        user.id,
    )
    return verification


def list_requests(
    reviewer: User | None,
    status: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    *,
    policy: AuthorizationPolicy | None = None,
) -> dict:
    """Return one page of verification requests, newest submission first."""

    reviewer = _require_identity(reviewer)
    policy = policy or AuthorizationPolicy.from_config()
    policy.require_admin(reviewer)

    if page < 1 or limit < 1:
        raise InvalidInput("page and limit must be positive integers.")

    query = VerificationRequest.query
    if status in VERIFICATION_STATUSES:
        query = query.filter(VerificationRequest.status == status)

    pagination = query.order_by(*_NEWEST_FIRST).paginate(
        page=page, per_page=limit, error_out=False
    )

    return {
        "requests": [item.to_dict() for item in pagination.items],
        "pagination": {
            "total": pagination.total,
            "page": page,
            "limit": limit,
            "pages": pagination.pages,
        },
    }
