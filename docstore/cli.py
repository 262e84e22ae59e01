"""
CLI utility for persisted collections.

Usage:
    docstore --stats
    docstore --list
    docstore --dump users
    docstore --purge users
    docstore --purge all
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from docstore.config.settings import Settings
from docstore.errors import StorageUnavailable
from docstore.persist.sqlite_store import SQLiteStorage
from docstore.persist.storage import parse_records


def format_bytes(bytes_val: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "KB", "MB", "GB"]:
        if bytes_val < 1024:
            return f"{bytes_val:.1f} {unit}"
        bytes_val /= 1024
    return f"{bytes_val:.1f} TB"


def format_time(ts: int) -> str:
    """Format unix timestamp as human-readable string."""
    if ts == 0:
        return "never"
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")


def show_stats(storage: SQLiteStorage) -> int:
    """Print row count, size and timestamps of the collections table."""
    stats = storage.stats()
    print(f"📊 Collection storage: {storage.db_path}\n")
    print(f"{'Collections':<15} {stats['count']:>10,}")
    print(f"{'Size':<15} {format_bytes(stats['total_bytes']):>10}")
    print(f"{'Oldest write':<15} {format_time(stats['oldest_ts']):>20}")
    print(f"{'Newest write':<15} {format_time(stats['newest_ts']):>20}")
    return 0


def list_collections(storage: SQLiteStorage, prefix: str) -> int:
    """Print stored collection names with their record counts."""
    keys = storage.keys(prefix)
    if not keys:
        print("No stored collections")
        return 0

    print(f"{'Collection':<30} {'Records':>10}")
    print("=" * 41)
    for key in keys:
        records = parse_records(storage.load(key) or "[]", key=key)
        print(f"{key[len(prefix):]:<30} {len(records):>10,}")
    return 0


def dump_collection(storage: SQLiteStorage, prefix: str, name: str) -> int:
    """Print one stored collection as pretty JSON."""
    key = f"{prefix}{name}"
    data = storage.load(key)
    if data is None:
        print(f"❌ Collection not found: {name}")
        return 1

    records = parse_records(data, key=key)
    print(json.dumps(records, indent=2, ensure_ascii=False))
    return 0


def purge_collections(storage: SQLiteStorage, prefix: str, name: str) -> int:
    """Delete one stored collection, or every one with "all"."""
    if name == "all":
        count = storage.purge()
        print(f"🗑️  {count:,} collections purged")
        storage.vacuum()
        return 0

    if not storage.delete(f"{prefix}{name}"):
        print(f"❌ Collection not found: {name}")
        return 1

    print(f"🗑️  Collection purged: {name}")
    return 0


def main(argv=None) -> int:
    """CLI entrypoint."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        description="Inspect and manage persisted document collections"
    )
    parser.add_argument("--stats", action="store_true", help="Show storage statistics")
    parser.add_argument("--list", action="store_true", help="List stored collections")
    parser.add_argument("--dump", type=str, metavar="NAME", help="Print a stored collection as JSON")
    parser.add_argument("--purge", type=str, metavar="NAME", help="Delete a stored collection ('all' for every one)")
    parser.add_argument(
        "--db",
        type=Path,
        default=Path(settings.storage.sqlite_path),
        help=f"SQLite database (default: {settings.storage.sqlite_path})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not (args.stats or args.list or args.dump or args.purge):
        parser.print_help()
        print("\n❌ Error: Must specify --stats, --list, --dump or --purge")
        return 1

    if not args.db.exists():
        print(f"❌ Storage database not found: {args.db}")
        return 1

    prefix = settings.store.key_prefix
    try:
        with SQLiteStorage(args.db) as storage:
            if args.stats:
                show_stats(storage)
            if args.list:
                list_collections(storage, prefix)
            if args.dump:
                if dump_collection(storage, prefix, args.dump) != 0:
                    return 1
            if args.purge:
                return purge_collections(storage, prefix, args.purge)
    except StorageUnavailable as e:
        print(f"❌ {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
