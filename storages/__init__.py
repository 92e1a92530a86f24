from __future__ import annotations

from .base import (
    BaseStorage,
    ReplayStats,
    StorageConfig,
    WorkloadOp,
    compare_storages,
    load_workload,
    parse_workload_line,
    run_storage,
)
from .hashmap import HashTable, fnv1a_32
from .mapping import MappingStorage
from .storage import Storage, create_storage

__all__ = [
    "BaseStorage",
    "HashTable",
    "MappingStorage",
    "ReplayStats",
    "Storage",
    "StorageConfig",
    "WorkloadOp",
    "compare_storages",
    "create_storage",
    "fnv1a_32",
    "load_workload",
    "parse_workload_line",
    "run_storage",
]
