"""Blog blueprint: public reading, publishing for verified researchers."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from errors import Forbidden, InvalidInput, NotFound
from models import db
from models.blog_post import BlogPost
from services.authorization import AuthorizationPolicy
from utils.identity import require_user
from utils.request_validation import parse_json_request

blog_bp = Blueprint("blog", __name__)

EXCERPT_LENGTH = 200


def _excerpt(content: str) -> str:
    text = " ".join(content.split())
    if len(text) <= EXCERPT_LENGTH:
        return text
    return text[:EXCERPT_LENGTH].rsplit(" ", 1)[0] + "..."


@blog_bp.route("", methods=["GET"])
def list_posts():
    """Return blog posts, newest first, optionally filtered by tag."""

    posts = BlogPost.query.order_by(BlogPost.created_at.desc(), BlogPost.id.desc()).all()
    tag = request.args.get("tag")
    if tag:
        posts = [post for post in posts if tag in (post.tags or [])]
    return jsonify({"posts": [post.to_dict() for post in posts], "count": len(posts)})


@blog_bp.route("/<int:post_id>", methods=["GET"])
def get_post(post_id: int):
    post = db.session.get(BlogPost, post_id)
    if post is None:
        raise NotFound("Blog post not found.")
    return jsonify({"post": post.to_dict()})


@blog_bp.route("", methods=["POST"])
@jwt_required()
def create_post():
    """Publish a post. Requires blog access granted by verification."""

    user = require_user()
    if not AuthorizationPolicy.from_config().can_write_blog(user):
        raise Forbidden("Blog publishing is not enabled for this account.")

    data = parse_json_request(request, required_keys=("title", "content"))
    tags = data.get("tags") or []
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise InvalidInput("tags must be a list of strings.")

    content = str(data["content"])
    post = BlogPost(
        title=str(data["title"]).strip(),
        content=content,
        excerpt=str(data.get("excerpt") or "").strip() or _excerpt(content),
        author=user.name or user.email,
        author_id=user.id,
        tags=tags,
        image=data.get("image") or None,
    )
    db.session.add(post)
    db.session.commit()

    return jsonify({"post": post.to_dict()}), HTTPStatus.CREATED
