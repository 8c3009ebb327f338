"""VerificationRequest model definition."""

from . import db, utcnow


VERIFICATION_STATUSES = ("pending", "approved", "rejected")
ACTIVE_STATUSES = ("pending", "approved")

_ACTIVE_CLAUSE = db.text("status IN ('pending', 'approved')")


class VerificationRequest(db.Model):
    """A user's application to become a verified researcher.

    ``user_name`` and ``user_email`` are a snapshot taken at submission time and
    are not kept in sync with later changes to the user.
    """

    __tablename__ = "verification_requests"
    __table_args__ = (
        db.Index(
            "uq_verification_requests_active_user",
            "user_id",
            unique=True,
            sqlite_where=_ACTIVE_CLAUSE,
            postgresql_where=_ACTIVE_CLAUSE,
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    user_name = db.Column(db.String(255), nullable=False, default="")
    user_email = db.Column(db.String(255), nullable=False)
    date_submitted = db.Column(db.DateTime, nullable=False, default=utcnow)
    research_field = db.Column(db.String(255), nullable=False)
    institution = db.Column(db.String(255), nullable=False)
    position = db.Column(db.String(255), nullable=False)
    publications_count = db.Column(db.Integer, nullable=False, default=0)
    motivation = db.Column(db.Text, nullable=False)
    publication_links = db.Column(db.JSON, nullable=False, default=list)
    status = db.Column(
        db.Enum(*VERIFICATION_STATUSES, name="verification_request_status"),
        nullable=False,
        default="pending",
        server_default=db.text("'pending'"),
    )
    roadmap_completed = db.Column(db.Boolean, nullable=False, default=False)
    reviewed_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    review_date = db.Column(db.DateTime, nullable=True)
    review_notes = db.Column(db.Text, nullable=True)

    user = db.relationship(
        "User",
        foreign_keys=[user_id],
        backref=db.backref("verification_requests", lazy="dynamic"),
    )
    reviewer = db.relationship("User", foreign_keys=[reviewed_by])

    def __repr__(self) -> str:
        return (
            f"<VerificationRequest id={self.id} user_id={self.user_id} "
            f"status={self.status}>"
        )

    def to_dict(self) -> dict:
        """Serialize the verification request into a dictionary."""

        return {
            "id": self.id,
            "userId": self.user_id,
            "userName": self.user_name,
            "userEmail": self.user_email,
            "dateSubmitted": self.date_submitted.isoformat()
            if self.date_submitted
            else None,
            "researchField": self.research_field,
            "institution": self.institution,
            "position": self.position,
            "publicationsCount": self.publications_count,
            "motivation": self.motivation,
            "publicationLinks": list(self.publication_links or []),
            "status": self.status,
            "roadmapCompleted": self.roadmap_completed,
            "reviewedBy": self.reviewed_by,
            "reviewDate": self.review_date.isoformat() if self.review_date else None,
            "reviewNotes": self.review_notes,
        }
