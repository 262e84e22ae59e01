"""
docstore - a minimal in-memory document store.

Provides:
- Ordered collections of schema-less records
- A small query language ($gt, $lt, $gte, $lte, $ne, $in, limit)
- Query-result caching invalidated on mutation
- Optional persistence through pluggable storage adapters
"""

from .errors import DocStoreError, InvalidArgument, StorageUnavailable
from .config.settings import Settings
from .collection import Collection, open_collection

__version__ = "0.1.0"

__all__ = [
    "Collection",
    "open_collection",
    "Settings",
    "DocStoreError",
    "InvalidArgument",
    "StorageUnavailable",
    "__version__",
]
