"""Key-value store unit tests.

Tests the file-backed and in-memory localStorage-style stores and backend
selection from settings, using a temporary directory.
"""

import pytest

from app.config import Settings
from app.services.key_value_store import (
    FileKeyValueStore,
    MemoryKeyValueStore,
    create_key_value_store,
)


@pytest.fixture
def file_store(tmp_path):
    """임시 디렉토리 기반 FileKeyValueStore fixture."""
    return FileKeyValueStore(base_path=str(tmp_path / "local_storage"))


class TestFileKeyValueStore:
    def test_set_and_get_roundtrip(self, file_store):
        file_store.set_item("generated-proposals", '[{"id": "gen-1"}]')
        assert file_store.get_item("generated-proposals") == '[{"id": "gen-1"}]'

    def test_get_missing_returns_none(self, file_store):
        assert file_store.get_item("nonexistent") is None

    def test_set_overwrites(self, file_store):
        file_store.set_item("key", "first")
        file_store.set_item("key", "second")
        assert file_store.get_item("key") == "second"

    def test_remove_item(self, file_store):
        file_store.set_item("key", "value")
        file_store.remove_item("key")
        assert file_store.get_item("key") is None

    def test_remove_missing_is_noop(self, file_store):
        file_store.remove_item("nonexistent")
        assert file_store.keys() == []

    def test_unicode_values(self, file_store):
        file_store.set_item("key", "한빛전자 / Cliente não informado")
        assert file_store.get_item("key") == "한빛전자 / Cliente não informado"

    def test_path_separators_in_key_stay_inside_base(self, file_store):
        file_store.set_item("../escape", "value")
        assert file_store.get_item("../escape") == "value"
        assert all(path.parent == file_store.base_path for path in file_store.base_path.iterdir())

    def test_creates_base_directory(self, tmp_path):
        store = FileKeyValueStore(base_path=str(tmp_path / "nested" / "dir"))
        assert store.base_path.is_dir()


class TestMemoryKeyValueStore:
    def test_initial_items(self):
        store = MemoryKeyValueStore({"a": "1"})
        assert store.get_item("a") == "1"
        assert store.keys() == ["a"]

    def test_remove_item(self):
        store = MemoryKeyValueStore()
        store.set_item("a", "1")
        store.remove_item("a")
        store.remove_item("a")
        assert store.get_item("a") is None


class TestCreateKeyValueStore:
    def test_file_backend(self, tmp_path):
        settings = Settings(storage_backend="file", storage_dir=str(tmp_path / "kv"))
        assert isinstance(create_key_value_store(settings), FileKeyValueStore)

    def test_memory_backend(self):
        assert isinstance(create_key_value_store(Settings(storage_backend="memory")), MemoryKeyValueStore)

    def test_none_backend(self):
        assert create_key_value_store(Settings(storage_backend="none")) is None

    def test_unknown_backend_raises(self):
        with pytest.raises(ValueError):
            create_key_value_store(Settings(storage_backend="redis"))
