from __future__ import annotations

from typing import Dict, List, MutableMapping, Optional

from .base import BaseStorage

# 进程内共享，对应浏览器的 localStorage；进程退出即丢失
_LOCAL_STORE: Dict[str, str] = {}


class MappingStorage(BaseStorage):
    """把存储接口直接委托给宿主提供的 MutableMapping。"""

    name = "mapping"

    def __init__(self, store: MutableMapping[str, str], name: Optional[str] = None) -> None:
        self.store = store
        if name is not None:
            self.name = name

    @classmethod
    def local(cls) -> "MappingStorage":
        return cls(_LOCAL_STORE, name="local")

    @classmethod
    def session(cls) -> "MappingStorage":
        return cls({}, name="session")

    def set_item(self, key: str, value: str) -> None:
        self.store[key] = value

    def get_item(self, key: str) -> Optional[str]:
        return self.store.get(key)

    def remove_item(self, key: str) -> None:
        self.store.pop(key, None)

    def clear(self) -> None:
        self.store.clear()

    def key_exists(self, key: str) -> bool:
        return key in self.store

    def keys(self) -> List[str]:
        return list(self.store)
