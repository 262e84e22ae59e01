"""
Document store - an ordered, in-memory collection of schema-less records.

Usage:
    users = Collection("users")
    users.insert({"name": "Foo", "age": 28})
    users.insert({"name": "Bar", "age": 18})

    users.find({"name": "Bar"})                  # [{"name": "Bar", "age": 18, "_id": ...}]
    users.find({"age": {"$gt": 20}})             # [{"name": "Foo", ...}]
    users.find({"name": {"$in": ["Foo", "Bar"]}, "limit": 1})

find() results are memoized per condition and dropped on every insert,
remove or clear. Records returned by find() are the stored objects
themselves unless `copy_results` is enabled; mutating them in place does
not invalidate cached results. remove() always rescans, so it only
deletes records that match at the time of the call.
"""

import copy
import logging
from collections.abc import Mapping, MutableMapping
from typing import Any, Callable, Iterable, Iterator, Optional

from docstore.cache.result_cache import ResultCache
from docstore.config.settings import Settings, create_storage
from docstore.errors import InvalidArgument, StorageUnavailable
from docstore.persist.ids import IdGenerator
from docstore.persist.storage import StorageAdapter, dump_records, parse_records
from docstore.query.engine import evaluate

ID_FIELD = "_id"


class Collection:
    """
    Named collection of records with query-result caching.

    Each instance owns its records and its cache. Not thread-safe:
    callers sharing one collection across threads must serialize access.
    """

    def __init__(
        self,
        name: str,
        persistent: bool = False,
        storage: Optional[StorageAdapter] = None,
        id_generator: Optional[Callable[[], str]] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize an empty collection.

        Args:
            name: Collection name (required)
            persistent: Flush to storage after every insert/remove
            storage: Persistence adapter used by save/load
            id_generator: Zero-argument callable returning a fresh id
            settings: Store settings (defaults to Settings())

        Raises:
            InvalidArgument: If name is missing
        """
        if not name or not isinstance(name, str):
            raise InvalidArgument("Collection needs a name")

        self.logger = logging.getLogger(__name__)
        self.settings = settings or Settings()
        self.name = name
        self.storage_key = f"{self.settings.store.key_prefix}{name}"
        self.storage = storage

        if persistent and storage is None:
            self.logger.warning(
                f"No storage backend for collection '{name}', persistence disabled"
            )
            persistent = False
        self.persistent = persistent

        self._next_id = id_generator or IdGenerator(self.settings.store.id_length)
        self._records: list[MutableMapping] = []
        self._cache = ResultCache()

    # --- Mutation -------------------------------------------------------------------

    def insert(self, record: MutableMapping) -> str:
        """
        Insert a record into this collection.

        The record object itself is stored and receives an `_id` field.

        Args:
            record: The data to insert

        Returns:
            The id of the inserted record

        Raises:
            InvalidArgument: If record is None or not a mapping
        """
        self._validate(record)

        record_id = self._next_id()
        record[ID_FIELD] = record_id
        self._records.append(record)
        self.clear_cache()

        if self.persistent:
            self._flush()
        return record_id

    def insert_many(self, records: Iterable[MutableMapping]) -> list[str]:
        """
        Insert several records with a single invalidation and flush.

        Nothing is inserted if any record is invalid.
        """
        records = list(records)
        for record in records:
            self._validate(record)

        ids = []
        for record in records:
            record_id = self._next_id()
            record[ID_FIELD] = record_id
            self._records.append(record)
            ids.append(record_id)
        self.clear_cache()

        if self.persistent and ids:
            self._flush()
        return ids

    def remove(self, condition: Optional[Mapping] = None) -> int:
        """
        Remove records which match condition.

        Args:
            condition: Query condition; None removes every record

        Returns:
            Number of records removed
        """
        # Fresh scan: cached positions may be stale after in-place edits
        indices = evaluate(self._records, condition, return_index=True)

        # Highest index first so earlier deletions don't shift later ones
        for index in sorted(indices, reverse=True):
            del self._records[index]
        self.clear_cache()

        if self.persistent and indices:
            self._flush()
        return len(indices)

    def clear(self) -> None:
        """Dump all records. Storage is left untouched."""
        self._records = []
        self.clear_cache()

    # --- Queries --------------------------------------------------------------------

    def find(self, condition: Optional[Mapping] = None, return_index: bool = False) -> list:
        """
        Return records which match condition, in insertion order.

        Args:
            condition: E.g. {"name": "Foo", "ts": {"$gt": 120302300}, "limit": 5}
            return_index: Return positions instead of the records themselves

        Returns:
            Matching records (or positions)
        """
        results = self.in_cache(condition, return_index)
        if results is None:
            results = evaluate(self._records, condition, return_index=return_index)
            self.logger.debug(
                f"Scanned {len(self._records)} records in '{self.name}', {len(results)} matched"
            )
            self.add_to_cache(condition, results, return_index)

        if self.settings.store.copy_results and not return_index:
            return copy.deepcopy(results)
        return list(results)

    def find_one(self, condition: Optional[Mapping] = None) -> Optional[MutableMapping]:
        """Return the first matching record, or None."""
        results = self.find(condition)
        return results[0] if results else None

    def count(self, condition: Optional[Mapping] = None) -> int:
        """Return the number of matching records."""
        return len(self.find(condition, return_index=True))

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MutableMapping]:
        return iter(list(self._records))

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, records={len(self._records)}, persistent={self.persistent})"

    def close(self) -> None:
        """Release the storage backend. In-memory records are kept."""
        if self.storage is not None:
            self.storage.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # --- Result cache ---------------------------------------------------------------

    def get_cache_key(self, condition: Optional[Mapping], return_index: bool = False) -> str:
        """Return the result cache key for a condition."""
        return self._cache.key(condition, return_index)

    def in_cache(self, condition: Optional[Mapping], return_index: bool = False) -> Optional[list]:
        """Return the cached result for a condition, or None if not cached."""
        key = self.get_cache_key(condition, return_index)
        results = self._cache.get(key)
        if results is not None:
            self.logger.debug(f"Result cache hit for '{self.name}' ({key})")
        return results

    def add_to_cache(self, condition: Optional[Mapping], results: list, return_index: bool = False) -> None:
        """Add a query result to the cache."""
        self._cache.put(self.get_cache_key(condition, return_index), results)

    def clear_cache(self) -> None:
        """Drop every cached result."""
        self._cache.clear()

    def cache_stats(self) -> dict[str, Any]:
        """Return result cache counters."""
        return self._cache.stats()

    # --- Persistence ----------------------------------------------------------------

    def save_persistent(self) -> bool:
        """
        Save the collection to storage.

        Returns:
            True if saved, False if no storage backend is configured

        Raises:
            StorageUnavailable: If the storage backend fails
        """
        if self.storage is None:
            self.logger.warning(f"No storage backend, collection '{self.name}' not saved")
            return False

        self.storage.save(self.storage_key, dump_records(self._records))
        return True

    def get_collection(self) -> Optional[list[dict]]:
        """
        Read the stored records without touching in-memory state.

        Returns:
            List of records, or None if nothing is stored

        Raises:
            StorageUnavailable: If the storage backend fails
        """
        if self.storage is None:
            self.logger.warning(f"No storage backend, collection '{self.name}' not loaded")
            return None

        data = self.storage.load(self.storage_key)
        if data is None:
            return None
        return parse_records(data, key=self.storage_key)

    def load(self) -> bool:
        """
        Replace in-memory records with the stored ones.

        Returns:
            True if records were loaded, False if nothing is stored

        Raises:
            StorageUnavailable: If the storage backend fails
        """
        records = self.get_collection()
        if records is None:
            return False

        self._records = records
        self.clear_cache()
        self.logger.info(f"Loaded {len(records)} records into '{self.name}'")
        return True

    # --- Internal -------------------------------------------------------------------

    @staticmethod
    def _validate(record: Any) -> None:
        if record is None:
            raise InvalidArgument("No data provided when inserting to Collection")
        if not isinstance(record, MutableMapping):
            raise InvalidArgument(
                f"Records must be mappings, got {type(record).__name__}"
            )

    def _flush(self) -> None:
        try:
            self.save_persistent()
        except StorageUnavailable as e:
            self.logger.warning(
                f"Persisting collection '{self.name}' failed, keeping in-memory state: {e}"
            )


def open_collection(
    name: str,
    persistent: bool = True,
    settings: Optional[Settings] = None,
    load: bool = True,
) -> Collection:
    """
    Create a collection wired to the configured storage backend.

    Args:
        name: Collection name
        persistent: Flush to storage after every insert/remove
        settings: Settings (defaults to Settings.from_env())
        load: Load previously stored records

    Returns:
        Collection instance
    """
    settings = settings or Settings.from_env()

    try:
        storage = create_storage(settings)
    except StorageUnavailable as e:
        logging.getLogger(__name__).warning(f"Storage backend unavailable, using memory only: {e}")
        storage = None

    collection = Collection(name, persistent=persistent, storage=storage, settings=settings)
    if load and storage is not None:
        try:
            collection.load()
        except StorageUnavailable:
            collection.close()
            raise
    return collection
