"""File ingestion: uploads, lookups, downloads and deletion of stored files."""

from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path
from typing import Iterable

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from errors import Forbidden, InvalidInput, NotFound, Unauthenticated
from models import db
from models.stored_file import StoredFile
from models.user import User, UserContribution
from services.authorization import AuthorizationPolicy
from storage import AbstractStorage, LocalStorage

logger = logging.getLogger(__name__)


def default_storage() -> AbstractStorage:
    return LocalStorage(current_app.config.get("UPLOAD_DIR"))


def build_unique_filename(original: str) -> str:
    """Derive a collision-resistant name that keeps the original stem and extension."""

    path = Path(original)
    stem = secure_filename(path.stem) or "file"
    extension = secure_filename(path.suffix.lstrip("."))
    suffix = f".{extension}" if extension else ""
    timestamp = int(time.time() * 1000)
    return f"{stem}-{timestamp}-{uuid.uuid4().hex[:8]}{suffix}"


def public_url(relative_path: str) -> str:
    prefix = current_app.config.get("UPLOAD_URL_PREFIX", "/uploads").rstrip("/")
    return f"{prefix}/{relative_path}"


def _stream_size(file: FileStorage) -> int:
    file.stream.seek(0, os.SEEK_END)
    size = file.stream.tell()
    file.stream.seek(0)
    return size


def _get_file_or_404(file_id: int) -> StoredFile:
    record = db.session.get(StoredFile, file_id)
    if record is None:
        raise NotFound("File not found.")
    return record


def upload_file(
    user: User | None,
    file: FileStorage | None,
    category: str | None,
    *,
    title: str | None = None,
    description: str | None = None,
    tags: Iterable[str] | None = None,
    storage: AbstractStorage | None = None,
) -> StoredFile:
    """Store an uploaded file and record its metadata for ``user``."""

    if user is None:
        raise Unauthenticated()
    if not isinstance(file, FileStorage) or not (file.filename or "").strip() or not category:
        raise InvalidInput("File and type are required.")
    if category not in current_app.config["FILE_CATEGORIES"]:
        raise InvalidInput("Invalid file type.")

    size = _stream_size(file)
    max_size = int(current_app.config.get("MAX_UPLOAD_SIZE", 0))
    if max_size and size > max_size:
        raise InvalidInput(
            f"File exceeds the maximum upload size of {max_size // (1024 * 1024)}MB."
        )

    storage = storage or default_storage()
    original_name = file.filename or "file"
    unique_name = build_unique_filename(original_name)
    relative_path = storage.save(file, f"{category}/{user.id}/{unique_name}")

    record = StoredFile(
        user_id=user.id,
        category=category,
        name=Path(relative_path).name,
        original_name=original_name,
        path=relative_path,
        url=public_url(relative_path),
        mime_type=file.mimetype or "application/octet-stream",
        size=size,
        title=(title or "").strip() or original_name,
        description=(description or "").strip(),
        tags=list(tags or []),
    )
    try:
        db.session.add(record)
        db.session.flush()
        if category in current_app.config["CONTRIBUTION_CATEGORIES"]:
            db.session.add(
                UserContribution(user_id=user.id, category=category, file_id=record.id)
            )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        storage.delete(relative_path)
        raise

    logger.info("User %s uploaded %s as file %s", user.id, relative_path, record.id)
    return record


def get_file(file_id: int) -> StoredFile:
    """Return a file record, counting the read as a view."""

    record = _get_file_or_404(file_id)
    StoredFile.query.filter_by(id=record.id).update(
        {"views": StoredFile.views + 1}, synchronize_session=False
    )
    db.session.commit()
    db.session.refresh(record)
    return record


def download_file(file_id: int) -> dict:
    """Count a download and return where to fetch the bytes from."""

    record = _get_file_or_404(file_id)
    StoredFile.query.filter_by(id=record.id).update(
        {"downloads": StoredFile.downloads + 1}, synchronize_session=False
    )
    db.session.commit()
    return {"url": record.url, "name": record.original_name}


def list_files(user: User | None, category: str | None = None) -> list[StoredFile]:
    """Return the user's files, newest first."""

    if user is None:
        raise Unauthenticated()
    query = StoredFile.query.filter_by(user_id=user.id)
    if category:
        if category not in current_app.config["FILE_CATEGORIES"]:
            raise InvalidInput("Invalid file type.")
        query = query.filter_by(category=category)
    return query.order_by(StoredFile.created_at.desc(), StoredFile.id.desc()).all()


def delete_file(
    user: User | None,
    file_id: int,
    *,
    storage: AbstractStorage | None = None,
    policy: AuthorizationPolicy | None = None,
) -> None:
    """Delete a file's record, contribution entry and stored bytes."""

    if user is None:
        raise Unauthenticated()
    record = _get_file_or_404(file_id)
    policy = policy or AuthorizationPolicy.from_config()
    if record.user_id != user.id and not policy.is_admin(user):
        raise Forbidden("You do not have permission to delete this file.")

    relative_path = record.path
    try:
        UserContribution.query.filter_by(file_id=record.id).delete(
            synchronize_session=False
        )
        db.session.delete(record)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    storage = storage or default_storage()
    if not storage.delete(relative_path):
        logger.warning("Stored bytes for file %s were already missing: %s", file_id, relative_path)
    logger.info("User %s deleted file %s", user.id, file_id)
