"""Storage errors."""

from __future__ import annotations


class StorageError(Exception):
    """A backend could not read or write its data."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
