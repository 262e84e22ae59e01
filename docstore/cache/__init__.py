"""
Query-result caching.

Provides:
- Canonical serialization and stable hashing of conditions
- A per-collection result cache invalidated on mutation
"""

from .hashing import canonical_json, stable_hash
from .result_cache import ResultCache

__all__ = [
    "canonical_json",
    "stable_hash",
    "ResultCache",
]
