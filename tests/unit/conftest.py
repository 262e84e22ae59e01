"""
Shared fixtures for unit tests.
"""
import pytest

from docstore.persist.sqlite_store import SQLiteStorage
from docstore.persist.storage import FileStorage, MemoryStorage


@pytest.fixture
def sqlite_storage(tmp_path):
    """Create a temporary SQLiteStorage instance."""
    storage = SQLiteStorage(tmp_path / "collections.db")
    yield storage
    storage.close()


@pytest.fixture
def file_storage(tmp_path):
    """Create a FileStorage rooted in a temporary directory."""
    return FileStorage(tmp_path / "collections")


@pytest.fixture
def memory_storage():
    """Create an empty MemoryStorage."""
    return MemoryStorage()


@pytest.fixture(params=["memory", "file", "sqlite"])
def any_storage(request):
    """Each storage adapter in turn."""
    return request.getfixturevalue(f"{request.param}_storage")
