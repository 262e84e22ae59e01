"""
Persistence layer for collections.

Provides:
- Random identifier generation for inserted records
- Storage adapters (memory, JSON files, SQLite)
- Record (de)serialization helpers
"""

from .ids import IdGenerator, random_id
from .storage import StorageAdapter, MemoryStorage, FileStorage, dump_records, parse_records
from .sqlite_store import SQLiteStorage

__all__ = [
    "IdGenerator",
    "random_id",
    "StorageAdapter",
    "MemoryStorage",
    "FileStorage",
    "SQLiteStorage",
    "dump_records",
    "parse_records",
]
