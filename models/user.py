"""User model definition."""

from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from . import db, utcnow


# Lower bound of roadmap progress for each level, highest first.
ROADMAP_THRESHOLDS = (
    (90, "Expert"),
    (70, "Advanced"),
    (40, "Intermediate"),
)


def roadmap_level_for(progress: Optional[int]) -> str:
    """Map a roadmap progress percentage onto a researcher level."""

    value = progress or 0
    for lower_bound, level in ROADMAP_THRESHOLDS:
        if value >= lower_bound:
            return level
    return "Beginner"


class User(db.Model):
    """Represents a lab portal user."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False, default="")
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.String(32),
        nullable=False,
        default="user",
        server_default=db.text("'user'"),
    )
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    verification_date = db.Column(db.DateTime, nullable=True)
    roadmap_progress = db.Column(db.Integer, nullable=False, default=0)
    roadmap_level = db.Column(db.String(32), nullable=True)
    institution = db.Column(db.String(255), nullable=True)
    position = db.Column(db.String(255), nullable=True)
    field = db.Column(db.String(255), nullable=True)
    blog_enabled = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(
        db.Boolean,
        nullable=False,
        default=True,
        server_default=db.text("true"),
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    contributions = db.relationship(
        "UserContribution",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    def promote_to_researcher(self, verification, verified_at) -> None:
        """Apply an approved verification request to this user. Idempotent."""

        self.role = "verified_researcher"
        self.is_verified = True
        self.verification_date = verified_at
        self.roadmap_level = roadmap_level_for(self.roadmap_progress)
        self.blog_enabled = True
        self.institution = verification.institution
        self.position = verification.position
        self.field = verification.research_field

    def contribution_ids(self, category: str) -> list[int]:
        """Return the ids of stored files attributed to this user for a category."""

        rows = self.contributions.filter_by(category=category).order_by(
            UserContribution.id.asc()
        )
        return [row.file_id for row in rows]

    def to_dict(self) -> dict:
        """Serialize the public profile of the user."""

        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "isVerified": self.is_verified,
            "verificationDate": self.verification_date.isoformat()
            if self.verification_date
            else None,
            "roadmapLevel": self.roadmap_level,
            "institution": self.institution,
            "position": self.position,
            "field": self.field,
            "blogEnabled": self.blog_enabled,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"


class UserContribution(db.Model):
    """One entry of a user's per-category contribution list."""

    __tablename__ = "user_contributions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    category = db.Column(db.String(32), nullable=False)
    file_id = db.Column(
        db.Integer,
        db.ForeignKey("stored_files.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User", back_populates="contributions")
