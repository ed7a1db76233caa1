"""
Tests for URL store strategies.

Store-contract tests run against every backend through the ``store`` fixture;
the SQL-only tests cover schema bootstrap, timestamps and error mapping.
"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError

from shortlink_app.config import Settings
from shortlink_app.exceptions import AliasExistsError, StorageError, URLNotFoundError
from shortlink_app.storage.factory import StoreBackend, URLStoreFactory
from shortlink_app.storage.strategies import InMemoryURLStore, SQLURLStore


class TestURLStoreContract:
    """Behaviour every store backend must share"""

    def test_save_then_get(self, store):
        """Test that a saved URL is returned for its alias"""
        store.save_url("https://example.com", "abc123")

        assert store.get_url("abc123") == "https://example.com"

    def test_url_stored_verbatim(self, store):
        """Test that the URL comes back exactly as saved"""
        url = "https://Example.com/Path?q=1&b=two#frag"
        store.save_url(url, "verbatim")

        assert store.get_url("verbatim") == url

    def test_duplicate_alias_rejected(self, store):
        """Test that a taken alias raises AliasExistsError and keeps the first URL"""
        store.save_url("https://example.com/first", "taken")

        with pytest.raises(AliasExistsError) as exc_info:
            store.save_url("https://example.com/second", "taken")

        assert exc_info.value.alias == "taken"
        assert exc_info.value.op.endswith("save_url")
        assert store.get_url("taken") == "https://example.com/first"

    def test_same_url_under_different_aliases(self, store):
        """Test that target URLs need not be unique"""
        store.save_url("https://example.com", "one")
        store.save_url("https://example.com", "two")

        assert store.get_url("one") == store.get_url("two") == "https://example.com"

    def test_get_unknown_alias(self, store):
        """Test that looking up a never-saved alias raises URLNotFoundError"""
        with pytest.raises(URLNotFoundError) as exc_info:
            store.get_url("nonexistent")

        assert exc_info.value.alias == "nonexistent"
        assert exc_info.value.op == f"storage.{store.name}.get_url"

    def test_delete_unknown_alias(self, store):
        """Test that deleting a never-saved alias raises URLNotFoundError"""
        with pytest.raises(URLNotFoundError):
            store.delete_url("nonexistent")

    def test_delete_returns_url_and_removes_record(self, store):
        """Test that delete returns the stored URL and the alias is gone afterwards"""
        store.save_url("https://example.com", "abc123")

        deleted_url = store.delete_url("abc123")

        assert deleted_url == "https://example.com"
        with pytest.raises(URLNotFoundError):
            store.get_url("abc123")
        with pytest.raises(URLNotFoundError):
            store.delete_url("abc123")

    def test_delete_only_touches_its_alias(self, store):
        """Test that delete removes exactly one record"""
        store.save_url("https://example.com/a", "a")
        store.save_url("https://example.com/b", "b")

        store.delete_url("a")

        assert store.get_url("b") == "https://example.com/b"

    def test_alias_reusable_after_delete(self, store):
        """Test that a deleted alias can be saved again"""
        store.save_url("https://example.com/old", "reuse")
        store.delete_url("reuse")

        store.save_url("https://example.com/new", "reuse")

        assert store.get_url("reuse") == "https://example.com/new"

    def test_record_fields(self, store):
        """Test that the full record carries id and timestamps"""
        store.save_url("https://example.com", "rec")

        record = store.get_record("rec")

        assert record.alias == "rec"
        assert record.target_url == "https://example.com"
        assert record.id >= 1
        assert record.created_at is not None
        assert record.updated_at == record.created_at

    def test_aliases_are_case_sensitive(self, store):
        """Test that aliases differing only in case are distinct"""
        store.save_url("https://example.com/lower", "abc")
        store.save_url("https://example.com/upper", "ABC")

        assert store.get_url("abc") == "https://example.com/lower"
        assert store.get_url("ABC") == "https://example.com/upper"

    @pytest.mark.parametrize("url, alias", [("", "alias"), ("https://example.com", "")])
    def test_empty_arguments_rejected(self, store, url, alias):
        """Test that empty url or alias is a programming error"""
        with pytest.raises(ValueError):
            store.save_url(url, alias)

    def test_concurrent_saves_same_alias(self, store):
        """Test that of many racing saves on one alias exactly one wins"""
        workers = 8
        barrier = threading.Barrier(workers)

        def save(i):
            barrier.wait()
            try:
                store.save_url(f"https://example.com/{i}", "race")
                return "ok"
            except AliasExistsError:
                return "exists"

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(save, range(workers)))

        assert results.count("ok") == 1
        assert results.count("exists") == workers - 1
        assert store.get_url("race").startswith("https://example.com/")

    def test_concurrent_deletes_same_alias(self, store):
        """Test that of racing deletes exactly one returns the URL"""
        store.save_url("https://example.com", "gone")
        workers = 4
        barrier = threading.Barrier(workers)

        def remove(_):
            barrier.wait()
            try:
                return store.delete_url("gone")
            except URLNotFoundError:
                return None

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(remove, range(workers)))

        assert results.count("https://example.com") == 1
        assert results.count(None) == workers - 1


class TestSQLURLStore:
    """SQL specifics: schema bootstrap, timestamps, error mapping"""

    def test_init_schema_is_idempotent(self, sql_store):
        """Test that bootstrapping twice keeps data and raises nothing"""
        sql_store.save_url("https://example.com", "keep")

        sql_store.init_schema()
        sql_store.init_schema()

        assert sql_store.get_url("keep") == "https://example.com"

    def test_schema_has_unique_alias_and_trigger(self, sql_store):
        """Test that the alias is backed by a unique index and the trigger exists"""
        with sql_store.engine.connect() as conn:
            indexes = conn.execute(text("PRAGMA index_list('urls')")).mappings().all()
            triggers = conn.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'trigger' AND tbl_name = 'urls'")
            ).scalars().all()

        assert any(index["unique"] for index in indexes)
        assert "urls_updated_at_trigger" in triggers

    def test_raw_insert_cannot_bypass_uniqueness(self, sql_store):
        """Test that the database itself rejects a duplicate alias"""
        sql_store.save_url("https://example.com", "dup")

        with pytest.raises(IntegrityError):
            with sql_store.engine.begin() as conn:
                conn.execute(text("INSERT INTO urls (alias, target_url) VALUES ('dup', 'x')"))

    def test_update_refreshes_updated_at(self, sql_store):
        """Test that any update moves updated_at forward, created_at stays"""
        sql_store.save_url("https://example.com", "touch")
        before = sql_store.get_record("touch")

        # CURRENT_TIMESTAMP has one-second resolution
        time.sleep(1.1)
        with sql_store.engine.begin() as conn:
            conn.execute(text("UPDATE urls SET target_url = 'https://example.org' WHERE alias = 'touch'"))

        after = sql_store.get_record("touch")
        assert after.target_url == "https://example.org"
        assert after.created_at == before.created_at
        assert after.updated_at > before.updated_at

    def test_storage_failure_is_wrapped(self, sql_store):
        """Test that a broken backend surfaces as StorageError with the cause chained"""
        with sql_store.engine.begin() as conn:
            conn.execute(text("DROP TABLE urls"))

        with pytest.raises(StorageError) as exc_info:
            sql_store.get_url("anything")

        assert exc_info.value.op == "storage.sql.get_url"
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_save_failure_is_not_reported_as_conflict(self, sql_store):
        """Test that only unique violations become AliasExistsError"""
        with sql_store.engine.begin() as conn:
            conn.execute(text("DROP TABLE urls"))

        with pytest.raises(StorageError):
            sql_store.save_url("https://example.com", "x")

    def test_ping(self, sql_store):
        """Test the reachability check"""
        assert sql_store.ping() is True

    def test_in_memory_database(self):
        """Test that sqlite :memory: works across sessions of one store"""
        store = SQLURLStore("sqlite:///:memory:")
        store.init_schema()

        store.save_url("https://example.com", "mem")

        assert store.get_url("mem") == "https://example.com"
        store.close()

    def test_creates_database_directory(self, tmp_path):
        """Test that a missing parent directory is created"""
        db_path = tmp_path / "nested" / "dir" / "urls.db"
        store = SQLURLStore(f"sqlite:///{db_path}")
        store.init_schema()

        assert db_path.exists()
        store.close()


class TestURLStoreFactory:
    """Test store factory"""

    def test_creates_sql_store(self, settings):
        """Test factory creates the SQL store from settings"""
        store = URLStoreFactory.create(StoreBackend.SQL, settings)
        assert isinstance(store, SQLURLStore)
        assert store.database_url == settings.database_url
        store.close()

    def test_creates_memory_store(self, settings):
        """Test factory creates the in-memory store"""
        store = URLStoreFactory.create(StoreBackend.MEMORY, settings)
        assert isinstance(store, InMemoryURLStore)

    def test_returns_new_instances(self, settings):
        """Test that stores are not process-wide singletons"""
        first = URLStoreFactory.create(StoreBackend.MEMORY, settings)
        second = URLStoreFactory.create(StoreBackend.MEMORY, settings)
        assert first is not second

    def test_unknown_backend_from_settings(self):
        """Test that an unknown backend name is refused"""
        settings = Settings(_env_file=None, storage_backend="mongo")
        with pytest.raises(ValueError):
            StoreBackend(settings.storage_backend)
