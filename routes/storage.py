"""Storage blueprint for research file uploads and retrieval."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request, send_from_directory
from flask_jwt_extended import jwt_required

from services.files import delete_file, download_file, get_file, list_files, upload_file
from storage.local_storage import LocalStorage
from utils.identity import require_user
from utils.request_validation import parse_tags

storage_bp = Blueprint("storage", __name__)
uploads_bp = Blueprint("uploads", __name__)


@storage_bp.route("/upload", methods=["POST"])
@jwt_required()
def upload():
    """Upload a research file and attribute it to the caller."""

    user = require_user()
    record = upload_file(
        user,
        request.files.get("file"),
        request.form.get("type"),
        title=request.form.get("title"),
        description=request.form.get("description"),
        tags=parse_tags(request.form.get("tags")),
    )

    return (
        jsonify({"message": "File uploaded successfully", "file": record.to_summary()}),
        HTTPStatus.CREATED,
    )


@storage_bp.route("/files", methods=["GET"])
@jwt_required()
def my_files():
    """List the caller's files, optionally restricted to one category."""

    user = require_user()
    files = list_files(user, request.args.get("type") or None)
    return jsonify({"files": [record.to_dict() for record in files], "count": len(files)})


@storage_bp.route("/file/<int:file_id>", methods=["GET"])
@jwt_required()
def file_details(file_id: int):
    """Return a file's metadata and count the view."""

    require_user()
    return jsonify({"file": get_file(file_id).to_dict()})


@storage_bp.route("/file/<int:file_id>/download", methods=["GET"])
@jwt_required()
def file_download(file_id: int):
    """Count a download and return the file's URL and original name."""

    require_user()
    return jsonify(download_file(file_id))


@storage_bp.route("/file/<int:file_id>", methods=["DELETE"])
@jwt_required()
def remove_file(file_id: int):
    """Delete one of the caller's files."""

    user = require_user()
    delete_file(user, file_id)
    return jsonify({"message": "File deleted successfully", "success": True})


@uploads_bp.route("/<path:filename>", methods=["GET"])
def serve_upload(filename: str):
    """Serve stored bytes at the public URL recorded for each file."""

    storage = LocalStorage(current_app.config.get("UPLOAD_DIR"))
    return send_from_directory(storage.base_directory.resolve(), filename)
