"""
Exception types raised by the document store.

Query-shape problems are never errors: a malformed condition simply
matches nothing.
"""

from typing import Optional


class DocStoreError(Exception):
    """Base class for document store errors."""
    pass


class InvalidArgument(DocStoreError, ValueError):
    """Raised when a required argument is missing or has the wrong shape."""
    pass


class StorageUnavailable(DocStoreError):
    """Raised when a persistence backend is absent, closed or failing."""

    def __init__(self, message: str, key: Optional[str] = None):
        self.key = key
        super().__init__(message if key is None else f"{message} (key={key})")
