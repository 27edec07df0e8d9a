from __future__ import annotations

import pytest

from adapters.sqlite_storage import SQLiteStorage
from core.errors import StoreError
from core.models import SubscriberEndpoint


@pytest.fixture()
def storage(tmp_path) -> SQLiteStorage:
    store = SQLiteStorage(str(tmp_path / "hauntscope.db"))
    store.init_db()
    return store


def test_recorded_event_ids_stay_recorded(storage: SQLiteStorage) -> None:
    assert not storage.contains_event_id("e1")

    storage.record_event_id("e1")
    storage.record_event_id("e1")
    storage.record_event_id("e2")

    assert storage.contains_event_id("e1")
    assert storage.dispatched_event_ids() == {"e1", "e2"}
    assert storage.count_dispatched() == 2


def test_event_ids_survive_a_new_adapter_instance(tmp_path) -> None:
    path = str(tmp_path / "hauntscope.db")
    first = SQLiteStorage(path)
    first.init_db()
    first.record_event_id("e1")

    second = SQLiteStorage(path)
    second.init_db()

    assert second.contains_event_id("e1")


def test_endpoints_add_list_and_remove(storage: SQLiteStorage) -> None:
    storage.add_endpoints(["https://hooks.test/a", "https://hooks.test/b"])
    storage.add_endpoints(["https://hooks.test/a"])

    assert storage.list_endpoints() == [
        SubscriberEndpoint("https://hooks.test/a"),
        SubscriberEndpoint("https://hooks.test/b"),
    ]

    storage.remove_endpoint("https://hooks.test/a")
    storage.remove_endpoint("https://hooks.test/a")

    assert storage.list_endpoints() == [SubscriberEndpoint("https://hooks.test/b")]


def test_sqlite_failures_surface_as_store_error(tmp_path) -> None:
    # A directory cannot be opened as a database file.
    broken = SQLiteStorage(str(tmp_path))

    with pytest.raises(StoreError):
        broken.init_db()
    with pytest.raises(StoreError):
        broken.contains_event_id("e1")
