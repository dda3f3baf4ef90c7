"""
Tests for local key/value stores and the typed cache over them.
"""
from datetime import datetime, timezone
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from splitsync.db.local_store import InMemoryLocalStore, SqlLocalStore
from splitsync.db.session import create_session_factory, init_db
from splitsync.schemas.group import Group, Participant
from splitsync.schemas.sync import OperationType, PendingOperation
from splitsync.services.local_cache import GROUPS_KEY, LAST_SYNC_KEY, LocalCache


@pytest.fixture
def sql_store():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    init_db(engine)
    yield SqlLocalStore(create_session_factory(engine))
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request, sql_store):
    if request.param == "memory":
        return InMemoryLocalStore()
    return sql_store


def test_get_set_delete(store):
    assert store.get("missing") is None
    store.set("key", {"a": [1, 2]})
    assert store.get("key") == {"a": [1, 2]}
    store.set("key", [3])
    assert store.get("key") == [3]
    store.delete("key")
    assert store.get("key") is None
    store.delete("key")


def test_returned_values_are_copies(store):
    store.set("key", {"a": [1]})
    value = store.get("key")
    value["a"].append(2)
    assert store.get("key") == {"a": [1]}


def test_cache_round_trips_collections(store):
    cache = LocalCache(store)
    group = Group(id="G1", name="Trip", participants=[Participant(name="A", id="ID-A")])
    cache.save_groups([group])
    cache.save_pending_operations([PendingOperation(type=OperationType.CREATE_GROUP, entity_id="G1")])
    synced_at = datetime(2024, 5, 1, tzinfo=timezone.utc)
    cache.save_last_sync_time(synced_at)

    assert cache.load_groups() == [group]
    assert cache.load_pending_operations()[0].entity_id == "G1"
    assert cache.load_last_sync_time() == synced_at

    cache.clear()
    assert cache.load_groups() == []
    assert cache.load_last_sync_time() is None


def test_cache_skips_corrupted_records():
    store = InMemoryLocalStore()
    store.set(GROUPS_KEY, [{"name": "Trip", "participants": []}, {"participants": "bad"}])
    groups = LocalCache(store).load_groups()
    assert [g.name for g in groups] == ["Trip"]


def test_cache_ignores_non_list_payload():
    store = InMemoryLocalStore()
    store.set(GROUPS_KEY, {"oops": True})
    assert LocalCache(store).load_groups() == []


def test_naive_last_sync_time_is_read_as_utc():
    store = InMemoryLocalStore()
    store.set(LAST_SYNC_KEY, "2024-05-01T08:00:00")
    assert LocalCache(store).load_last_sync_time() == datetime(2024, 5, 1, 8, tzinfo=timezone.utc)
