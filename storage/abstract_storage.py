"""Storage abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO, BinaryIO


class AbstractStorage(ABC):
    """Interface for storage backends.

    Paths are relative, ``/``-separated keys such as ``papers/7/report.pdf``.
    """

    @abstractmethod
    def save(self, file_obj: IO[bytes], path: str) -> str:
        """Persist a file under ``path`` and return the stored relative path."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return whether the given relative path exists in storage."""

    @abstractmethod
    def open(self, path: str, mode: str = "rb") -> BinaryIO:
        """Open a stored file and return the file object."""

    @abstractmethod
    def delete(self, path: str) -> bool:
        """Remove a stored file, returning False if it was already absent."""
