import logging

import pytest

from storages import HashTable, MappingStorage, Storage, StorageConfig, create_storage


def test_create_storage():
    assert isinstance(create_storage("hashmap"), HashTable)
    assert isinstance(create_storage(" HashMap "), HashTable)
    assert create_storage("local").name == "local"
    assert create_storage("session").name == "session"

    with pytest.raises(ValueError):
        create_storage("redis")


def test_create_storage_initial_size():
    table = create_storage("hashmap", StorageConfig(initial_size=16))
    assert table.size == 16
    # 0 / None mean "use the default"
    assert create_storage("hashmap", StorageConfig(initial_size=0)).size == 4


def test_unknown_type_falls_back_to_hashmap(caplog):
    with caplog.at_level(logging.WARNING, logger="storages.storage"):
        storage = Storage("indexeddb")
    assert isinstance(storage.backend, HashTable)
    assert 'Invalid storage type: "indexeddb"' in caplog.text


@pytest.mark.parametrize("type", ["hashmap", "local", "session"])
def test_storage_contract(type):
    storage = Storage(type)
    storage.clear()

    storage.set_item("a", "1")
    storage.set_item("b", "2")
    storage.set("a", "3")
    assert storage.get_item("a") == "3"
    assert storage.get("b") == "2"
    assert storage.get_item("missing") is None
    assert storage.key_exists("a")
    assert sorted(storage.keys()) == ["a", "b"]

    storage.remove("a")
    assert storage.get_item("a") is None
    assert not storage.key_exists("a")
    assert storage.keys() == ["b"]

    storage.clear()
    assert storage.keys() == []
    assert not storage.key_exists("b")
    assert storage.backend.keys() == []


def test_key_cache_tracks_facade_writes():
    storage = Storage("hashmap")
    storage.set_item("a", "1")
    storage.remove_item("missing")
    assert storage.keys() == ["a"]
    storage.backend.remove_item("a")
    # the cache only sees writes made through the facade
    assert storage.key_exists("a")
    assert storage.get_item("a") is None


def test_local_is_shared_session_is_not():
    first = MappingStorage.local()
    second = MappingStorage.local()
    first.clear()
    first.set_item("k", "v")
    assert second.get_item("k") == "v"
    first.clear()

    s1 = MappingStorage.session()
    s2 = MappingStorage.session()
    s1.set_item("k", "v")
    assert s2.get_item("k") is None


def test_mapping_storage_wraps_host_mapping():
    host = {"x": "1"}
    storage = MappingStorage(host)
    assert storage.key_exists("x")
    storage.set_item("y", "2")
    storage.remove_item("x")
    storage.remove_item("x")
    assert host == {"y": "2"}
    assert storage.keys() == ["y"]


@pytest.mark.parametrize("size", [-1, -8])
def test_invalid_size_raises_without_fallback(size, caplog):
    with caplog.at_level(logging.WARNING, logger="storages.storage"):
        with pytest.raises(ValueError):
            Storage("hashmap", StorageConfig(initial_size=size))
    assert "Invalid storage type" not in caplog.text


def test_local_over_given_host_store():
    host = {}
    storage = create_storage("local", StorageConfig(host_store=host))
    storage.set_item("k", "v")
    assert host == {"k": "v"}
    assert MappingStorage.local().get_item("k") is None
