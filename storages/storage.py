from __future__ import annotations

import logging
from typing import List, Optional, Set

from .base import BaseStorage, StorageConfig
from .hashmap import HashTable
from .mapping import MappingStorage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE = "hashmap"
STORAGE_TYPES = frozenset({"hashmap", "local", "session"})


def create_storage(name: str, args=None) -> BaseStorage:
    key = name.strip().lower()
    if key == "hashmap":
        initial_size = getattr(args, "initial_size", None) or None
        return HashTable(initial_size)
    if key == "local":
        host_store = getattr(args, "host_store", None)
        if host_store is not None:
            return MappingStorage(host_store, name="local")
        return MappingStorage.local()
    if key == "session":
        return MappingStorage.session()
    raise ValueError(f"未知存储类型: {name}")


class Storage(BaseStorage):
    """
    对外门面：按类型标签选择后端，并在其上维护一份 key 集合缓存。
    key_exists / keys 直接读缓存，get_item 走后端。
    未知标签不报错，记一条 warning 后退回 hashmap。
    """

    def __init__(self, type: str = DEFAULT_STORAGE, config: Optional[StorageConfig] = None) -> None:
        self._storage = self._initialise_storage(type, config)
        self._key_cache: Set[str] = set()
        self.name = self._storage.name

    def _initialise_storage(self, type: str, config: Optional[StorageConfig]) -> BaseStorage:
        # 只有未知标签才回退；配置错误（如非法 size）直接抛出
        if type.strip().lower() not in STORAGE_TYPES:
            logger.warning('Invalid storage type: "%s". Defaulting to Hashmap', type)
            type = DEFAULT_STORAGE
        return create_storage(type, config)

    @property
    def backend(self) -> BaseStorage:
        return self._storage

    def set_item(self, key: str, value: str) -> None:
        self._storage.set_item(key, value)
        self._key_cache.add(key)

    def get_item(self, key: str) -> Optional[str]:
        return self._storage.get_item(key)

    def remove_item(self, key: str) -> None:
        self._storage.remove_item(key)
        self._key_cache.discard(key)

    def clear(self) -> None:
        self._storage.clear()
        self._key_cache.clear()

    def key_exists(self, key: str) -> bool:
        return key in self._key_cache

    def keys(self) -> List[str]:
        return list(self._key_cache)

    # 门面的简写
    set = set_item
    get = get_item
    remove = remove_item
