"""Tests for the verification workflow services."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from errors import (
    DuplicateRequest,
    Forbidden,
    InvalidInput,
    InvalidTransition,
    NotFound,
    Unauthenticated,
)
from models import db, utcnow
from models.user import User
from models.verification_request import VerificationRequest
from services.verification import (
    get_request_status,
    list_requests,
    review_request,
    submit_request,
)

VALID_FIELDS = {
    "researchField": "CV",
    "institution": "X",
    "position": "PhD",
    "motivation": "Study",
}


def _get_user(user_id: int) -> User:
    return db.session.get(User, user_id)


def test_submit_creates_pending_request_with_defaults(app, make_user):
    user_id = make_user("alice@lab.example", name="Alice")

    with app.app_context():
        verification = submit_request(_get_user(user_id), VALID_FIELDS)

        assert verification.status == "pending"
        assert verification.publications_count == 0
        assert verification.publication_links == []
        assert verification.roadmap_completed is False
        assert verification.user_name == "Alice"
        assert verification.user_email == "alice@lab.example"
        assert verification.reviewed_by is None

        status = get_request_status(_get_user(user_id))
        assert status["status"] == "pending"
        assert status["requestId"] == verification.id
        assert status["reviewDate"] is None

        user = _get_user(user_id)
        assert user.role == "user"
        assert user.is_verified is False


def test_submit_keeps_optional_fields(app, make_user):
    user_id = make_user("opt@lab.example")
    fields = dict(
        VALID_FIELDS,
        publicationsCount=4,
        publicationLinks=["https://arxiv.org/abs/1", " "],
        roadmapCompleted=True,
    )

    with app.app_context():
        verification = submit_request(_get_user(user_id), fields)

        assert verification.publications_count == 4
        assert verification.publication_links == ["https://arxiv.org/abs/1"]
        assert verification.roadmap_completed is True


@pytest.mark.parametrize("missing", ["researchField", "institution", "position", "motivation"])
def test_submit_requires_text_fields(app, make_user, missing):
    user_id = make_user("missing@lab.example")
    fields = dict(VALID_FIELDS, **{missing: "  "})

    with app.app_context():
        with pytest.raises(InvalidInput) as excinfo:
            submit_request(_get_user(user_id), fields)
        assert missing in excinfo.value.details
        assert VerificationRequest.query.count() == 0


@pytest.mark.parametrize(
    "extra",
    [
        {"publicationsCount": -1},
        {"publicationsCount": "many"},
        {"publicationLinks": "https://example.org"},
        {"roadmapCompleted": "maybe"},
    ],
)
def test_submit_rejects_malformed_optional_fields(app, make_user, extra):
    user_id = make_user("malformed@lab.example")

    with app.app_context():
        with pytest.raises(InvalidInput):
            submit_request(_get_user(user_id), dict(VALID_FIELDS, **extra))


def test_submit_requires_identity(app):
    with app.app_context():
        with pytest.raises(Unauthenticated):
            submit_request(None, VALID_FIELDS)


@pytest.mark.parametrize("existing_status", ["pending", "approved"])
def test_submit_rejects_duplicate_active_request(app, make_user, existing_status):
    user_id = make_user("dup@lab.example")

    with app.app_context():
        first = submit_request(_get_user(user_id), VALID_FIELDS)
        first.status = existing_status
        db.session.commit()

        with pytest.raises(DuplicateRequest) as excinfo:
            submit_request(_get_user(user_id), VALID_FIELDS)

        assert excinfo.value.status == existing_status
        assert VerificationRequest.query.count() == 1


def test_rejected_user_may_submit_again(app, make_user):
    user_id = make_user("retry@lab.example")
    admin_id = make_user("boss@lab.example", role="admin")

    with app.app_context():
        first = submit_request(_get_user(user_id), VALID_FIELDS)
        review_request(_get_user(admin_id), first.id, "reject", "try again")

        second = submit_request(_get_user(user_id), VALID_FIELDS)

        assert second.id != first.id
        assert get_request_status(_get_user(user_id))["requestId"] == second.id


def test_storage_rejects_second_active_request(app, make_user):
    user_id = make_user("race@lab.example")

    with app.app_context():
        submit_request(_get_user(user_id), VALID_FIELDS)
        db.session.add(
            VerificationRequest(
                user_id=user_id,
                user_email="race@lab.example",
                research_field="CV",
                institution="X",
                position="PhD",
                motivation="Study",
                status="pending",
            )
        )
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()


def test_status_is_none_without_requests(app, make_user):
    user_id = make_user("new@lab.example")

    with app.app_context():
        assert get_request_status(_get_user(user_id))["status"] == "none"


def test_approve_promotes_user(app, make_user):
    user_id = make_user("cv@lab.example", roadmap_progress=90)
    admin_id = make_user("admin@lab.example", role="admin")

    with app.app_context():
        verification = submit_request(_get_user(user_id), VALID_FIELDS)
        reviewed = review_request(_get_user(admin_id), verification.id, "approve", "ok")

        assert reviewed.status == "approved"
        assert reviewed.reviewed_by == admin_id
        assert reviewed.review_notes == "ok"
        assert reviewed.review_date is not None

        user = _get_user(user_id)
        assert user.role == "verified_researcher"
        assert user.is_verified is True
        assert user.blog_enabled is True
        assert user.roadmap_level == "Expert"
        assert user.verification_date == reviewed.review_date
        assert user.institution == "X"
        assert user.position == "PhD"
        assert user.field == "CV"


def test_reject_leaves_user_unchanged(app, make_user):
    user_id = make_user("b@lab.example")
    admin_id = make_user("admin@lab.example", role="admin")

    with app.app_context():
        verification = submit_request(_get_user(user_id), VALID_FIELDS)
        reviewed = review_request(_get_user(admin_id), verification.id, "reject", None)

        assert reviewed.status == "rejected"
        assert reviewed.review_notes == ""
        user = _get_user(user_id)
        assert user.role == "user"
        assert user.is_verified is False
        assert user.field is None


def test_allow_listed_email_can_review(app, make_user):
    user_id = make_user("c@lab.example")
    director_id = make_user("director@lab.example")

    with app.app_context():
        verification = submit_request(_get_user(user_id), VALID_FIELDS)
        reviewed = review_request(_get_user(director_id), verification.id, "approve")

        assert reviewed.status == "approved"


def test_non_admin_review_is_forbidden_and_changes_nothing(app, make_user):
    user_id = make_user("d@lab.example")
    other_id = make_user("other@lab.example", role="verified_researcher")

    with app.app_context():
        verification = submit_request(_get_user(user_id), VALID_FIELDS)

        with pytest.raises(Forbidden):
            review_request(_get_user(other_id), verification.id, "approve")

        assert db.session.get(VerificationRequest, verification.id).status == "pending"
        assert _get_user(user_id).role == "user"


@pytest.mark.parametrize(
    "request_id, action",
    [(None, "approve"), ("abc", "approve"), (1, "promote"), (1, None)],
)
def test_review_validates_parameters(app, make_user, request_id, action):
    admin_id = make_user("admin@lab.example", role="admin")

    with app.app_context():
        with pytest.raises(InvalidInput):
            review_request(_get_user(admin_id), request_id, action)


def test_review_unknown_request_is_not_found(app, make_user):
    admin_id = make_user("admin@lab.example", role="admin")

    with app.app_context():
        with pytest.raises(NotFound):
            review_request(_get_user(admin_id), 9999, "approve")


def test_review_of_request_with_missing_user_is_not_found(app, make_user):
    admin_id = make_user("admin@lab.example", role="admin")

    with app.app_context():
        orphan = VerificationRequest(
            user_id=4242,
            user_email="ghost@lab.example",
            research_field="CV",
            institution="X",
            position="PhD",
            motivation="Study",
        )
        db.session.add(orphan)
        db.session.commit()

        with pytest.raises(NotFound):
            review_request(_get_user(admin_id), orphan.id, "approve")


def test_reviewed_request_cannot_change_outcome(app, make_user):
    user_id = make_user("e@lab.example")
    admin_id = make_user("admin@lab.example", role="admin")

    with app.app_context():
        verification = submit_request(_get_user(user_id), VALID_FIELDS)
        review_request(_get_user(admin_id), verification.id, "reject", "no")

        with pytest.raises(InvalidTransition) as excinfo:
            review_request(_get_user(admin_id), verification.id, "approve")

        assert excinfo.value.status == "rejected"
        assert _get_user(user_id).role == "user"


def test_review_losing_race_to_another_reviewer_conflicts(app, make_user, monkeypatch):
    user_id = make_user("race@lab.example")
    admin_id = make_user("admin@lab.example", role="admin")

    with app.app_context():
        verification = submit_request(_get_user(user_id), VALID_FIELDS)
        request_id = verification.id
        reviewer = _get_user(admin_id)
        original_get = db.session.get

        def get_then_concurrent_review(model, ident, *args, **kwargs):
            result = original_get(model, ident, *args, **kwargs)
            if model is User:
                # Another reviewer decides after the request was loaded.
                db.session.execute(
                    db.text(
                        "UPDATE verification_requests SET status = 'rejected' "
                        "WHERE id = :id"
                    ),
                    {"id": request_id},
                )
            return result

        monkeypatch.setattr(db.session, "get", get_then_concurrent_review)

        with pytest.raises(InvalidTransition) as excinfo:
            review_request(reviewer, request_id, "approve")
        monkeypatch.undo()

        assert excinfo.value.code == 409
        assert _get_user(user_id).role == "user"
        assert not _get_user(user_id).is_verified


def test_repeated_approval_reapplies_promotion(app, make_user):
    user_id = make_user("f@lab.example")
    admin_id = make_user("admin@lab.example", role="admin")

    with app.app_context():
        verification = submit_request(_get_user(user_id), VALID_FIELDS)
        first = review_request(_get_user(admin_id), verification.id, "approve", "ok")
        first_review_date = first.review_date

        # Simulate a promotion write that never landed.
        user = _get_user(user_id)
        user.role = "user"
        user.is_verified = False
        db.session.commit()

        replayed = review_request(_get_user(admin_id), verification.id, "approve")

        assert replayed.status == "approved"
        assert replayed.review_date == first_review_date
        assert replayed.review_notes == "ok"
        user = _get_user(user_id)
        assert user.role == "verified_researcher"
        assert user.is_verified is True
        assert user.verification_date == first_review_date


def _seed_requests(user_ids, statuses):
    base = utcnow()
    for offset, (user_id, status) in enumerate(zip(user_ids, statuses)):
        db.session.add(
            VerificationRequest(
                user_id=user_id,
                user_email=f"user{user_id}@lab.example",
                date_submitted=base + timedelta(minutes=offset),
                research_field="CV",
                institution="X",
                position="PhD",
                motivation="Study",
                status=status,
            )
        )
    db.session.commit()


def test_list_filters_by_status_newest_first(app, make_user):
    admin_id = make_user("admin@lab.example", role="admin")
    user_ids = [make_user(f"u{i}@lab.example") for i in range(5)]

    with app.app_context():
        _seed_requests(
            user_ids, ["approved", "pending", "approved", "rejected", "approved"]
        )

        result = list_requests(_get_user(admin_id), status="approved", page=1, limit=2)

        statuses = {item["status"] for item in result["requests"]}
        assert statuses == {"approved"}
        submitted = [item["dateSubmitted"] for item in result["requests"]]
        assert submitted == sorted(submitted, reverse=True)
        assert result["requests"][0]["userId"] == user_ids[4]
        assert result["pagination"] == {"total": 3, "page": 1, "limit": 2, "pages": 2}

        second_page = list_requests(_get_user(admin_id), status="approved", page=2, limit=2)
        assert [item["userId"] for item in second_page["requests"]] == [user_ids[0]]


def test_list_without_filter_returns_everything(app, make_user):
    admin_id = make_user("admin@lab.example", role="admin")
    user_ids = [make_user(f"u{i}@lab.example") for i in range(3)]

    with app.app_context():
        _seed_requests(user_ids, ["approved", "pending", "rejected"])

        everything = list_requests(_get_user(admin_id))
        unknown_filter = list_requests(_get_user(admin_id), status="archived")

        assert everything["pagination"]["total"] == 3
        assert everything["pagination"]["limit"] == 50
        assert everything["pagination"]["pages"] == 1
        assert unknown_filter["pagination"]["total"] == 3


def test_list_is_admin_only(app, make_user):
    user_id = make_user("plain@lab.example")

    with app.app_context():
        with pytest.raises(Forbidden):
            list_requests(_get_user(user_id))


def test_list_rejects_non_positive_paging(app, make_user):
    admin_id = make_user("admin@lab.example", role="admin")

    with app.app_context():
        with pytest.raises(InvalidInput):
            list_requests(_get_user(admin_id), page=0)
