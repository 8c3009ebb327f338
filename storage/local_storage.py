"""Local filesystem storage implementation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import IO, BinaryIO

from werkzeug.utils import secure_filename

from config import Config

from .abstract_storage import AbstractStorage


class LocalStorage(AbstractStorage):
    """Persist files to the local filesystem under the configured upload directory."""

    def __init__(self, upload_dir: str | None = None):
        self.base_directory = Path(upload_dir or Config.UPLOAD_DIR)
        os.makedirs(self.base_directory, exist_ok=True)

    def _safe_relative(self, path: str) -> Path:
        parts = [secure_filename(part) for part in path.split("/") if part]
        if not parts or not all(parts):
            raise ValueError("Path must contain at least one valid character per segment.")
        return Path(*parts)

    def absolute_path(self, path: str) -> Path:
        return self.base_directory / self._safe_relative(path)

    def save(self, file_obj: IO[bytes], path: str) -> str:
        """Save a file and return the relative path within the upload directory."""

        relative = self._safe_relative(path)
        destination = self.base_directory / relative
        destination.parent.mkdir(parents=True, exist_ok=True)
        if hasattr(file_obj, "save"):
            file_obj.save(destination)  # type: ignore[arg-type]
        else:
            with open(destination, "wb") as output:
                output.write(file_obj.read())

        return relative.as_posix()

    def exists(self, path: str) -> bool:
        """Return True if the given relative path exists within the upload directory."""

        return self.absolute_path(path).exists()

    def open(self, path: str, mode: str = "rb") -> BinaryIO:
        """Open a stored file using the provided mode."""

        return open(self.absolute_path(path), mode)

    def delete(self, path: str) -> bool:
        """Delete a stored file; a file that is already gone is not an error."""

        try:
            self.absolute_path(path).unlink()
        except FileNotFoundError:
            return False
        return True
