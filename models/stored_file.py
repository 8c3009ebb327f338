"""StoredFile model definition."""

from . import db, utcnow


class StoredFile(db.Model):
    """Metadata for a file uploaded to the lab's storage backend."""

    __tablename__ = "stored_files"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    category = db.Column(db.String(32), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False, unique=True)
    original_name = db.Column(db.String(255), nullable=False)
    path = db.Column(db.String(512), nullable=False)
    url = db.Column(db.String(1024), nullable=False)
    mime_type = db.Column(db.String(128), nullable=False)
    size = db.Column(db.Integer, nullable=False, default=0)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    tags = db.Column(db.JSON, nullable=False, default=list)
    views = db.Column(db.Integer, nullable=False, default=0)
    downloads = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    owner = db.relationship(
        "User",
        backref=db.backref("files", lazy="dynamic"),
    )

    def __repr__(self) -> str:
        return f"<StoredFile id={self.id} category={self.category} name={self.name}>"

    def to_summary(self) -> dict:
        """Serialize the fields returned right after an upload."""

        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "type": self.category,
            "size": self.size,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def to_dict(self) -> dict:
        """Serialize the full file record."""

        data = self.to_summary()
        data.update(
            {
                "name": self.name,
                "originalName": self.original_name,
                "mimeType": self.mime_type,
                "tags": list(self.tags or []),
                "views": self.views,
                "downloads": self.downloads,
                "userId": self.user_id,
            }
        )
        return data
