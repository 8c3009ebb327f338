"""BlogPost model definition."""

from . import db, utcnow


class BlogPost(db.Model):
    """A post on the lab blog."""

    __tablename__ = "blog_posts"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    excerpt = db.Column(db.Text, nullable=False, default="")
    author = db.Column(db.String(255), nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    likes = db.Column(db.Integer, nullable=False, default=0)
    comments = db.Column(db.JSON, nullable=False, default=list)
    image = db.Column(db.String(1024), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=True, onupdate=utcnow)

    def to_dict(self) -> dict:
        created = self.created_at.isoformat() if self.created_at else None
        return {
            "id": str(self.id),
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "author": self.author,
            "createdAt": created,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else created,
            "tags": list(self.tags or []),
            "likes": self.likes,
            "comments": list(self.comments or []),
            "image": self.image,
        }
