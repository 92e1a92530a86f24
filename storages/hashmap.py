from __future__ import annotations

import logging
import math
import struct
from typing import List, Optional

from .base import BaseStorage

logger = logging.getLogger(__name__)

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619

Bucket = List[List[str]]


def fnv1a_32(key: str) -> int:
    """32 位 FNV-1a，按 UTF-16 code unit 逐个混入（BMP 以外的字符拆成代理对）。"""
    h = FNV_OFFSET_BASIS
    data = key.encode("utf-16-le", "surrogatepass")
    for (unit,) in struct.iter_unpack("<H", data):
        h ^= unit
        h = (h * FNV_PRIME) % 2**32
    return h


class HashTable(BaseStorage):
    """
    链地址法哈希表 (str -> str):
    - 桶下标 = fnv1a_32(key) % size，size 不要求是 2 的幂，必须用取模
    - 新增 key 后 count / size > GROW_LOAD 时扩容为 size * 2
    - 删除后 count / size < SHRINK_LOAD 且 size > SHRINK_MIN_SIZE 时缩容为 ceil(size * 0.5)
    - 重建时把旧条目逐个走 set_item 重新插入，插入路径上的扩容检查保持生效
    注意 SHRINK_MIN_SIZE 只限制“是否开始缩容”，缩容结果可以落到 10 以下。
    """

    name = "hashmap"

    DEFAULT_SIZE: int = 4
    GROW_LOAD: float = 0.70
    GROW_FACTOR: int = 2
    SHRINK_LOAD: float = 0.40
    SHRINK_FACTOR: float = 0.50
    SHRINK_MIN_SIZE: int = 10

    def __init__(self, size: Optional[int] = None) -> None:
        if size is None:
            size = self.DEFAULT_SIZE
        _check_size(size)
        self._initial_size = size
        self._size = size
        self._count = 0
        self._buckets: List[Bucket] = self._new(size)

    # ------------------------------------------------------------------
    # 内部：建表 / 重建 / 负载检查
    # ------------------------------------------------------------------

    def _new(self, size: int) -> List[Bucket]:
        self._count = 0
        return [[] for _ in range(size)]

    def _resize(self, new_size: int) -> None:
        _check_size(new_size)
        old_buckets = self._buckets
        self._size = new_size
        self._buckets = self._new(new_size)
        logger.debug("Resizing hashmap to size %d...", new_size)
        for bucket in old_buckets:
            for key, value in bucket:
                self.set_item(key, value)

    def _check_load_factor(self) -> None:
        if self._count / self._size > self.GROW_LOAD:
            self._resize(self._size * self.GROW_FACTOR)

    def _check_under_load_factor(self) -> None:
        if self._count / self._size < self.SHRINK_LOAD and self._size > self.SHRINK_MIN_SIZE:
            self._resize(math.ceil(self._size * self.SHRINK_FACTOR))

    def _get_bucket(self, key: str) -> Bucket:
        return self._buckets[fnv1a_32(key) % self._size]

    # ------------------------------------------------------------------
    # 存储接口
    # ------------------------------------------------------------------

    def set_item(self, key: str, value: str) -> None:
        bucket = self._get_bucket(key)
        for entry in bucket:
            if entry[0] == key:
                entry[1] = value
                return
        bucket.append([key, value])
        self._count += 1
        self._check_load_factor()

    def get_item(self, key: str) -> Optional[str]:
        for entry_key, value in self._get_bucket(key):
            if entry_key == key:
                return value
        return None

    def remove_item(self, key: str) -> None:
        bucket = self._get_bucket(key)
        for i, entry in enumerate(bucket):
            if entry[0] == key:
                del bucket[i]
                self._count -= 1
                self._check_under_load_factor()
                return

    def clear(self) -> None:
        self._size = self._initial_size
        self._buckets = self._new(self._size)

    def key_exists(self, key: str) -> bool:
        return self.get_item(key) is not None

    def keys(self) -> List[str]:
        return [key for bucket in self._buckets for key, _ in bucket]

    # ------------------------------------------------------------------
    # 统计
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        return self._size

    @property
    def count(self) -> int:
        return self._count

    @property
    def initial_size(self) -> int:
        return self._initial_size

    @property
    def load_factor(self) -> float:
        return self._count / self._size

    def bucket_lengths(self) -> List[int]:
        return [len(bucket) for bucket in self._buckets]

    def __len__(self) -> int:
        return self._count

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.key_exists(key)

    def __repr__(self) -> str:
        return f"HashTable(size={self._size}, count={self._count})"


def _check_size(size: int) -> None:
    if isinstance(size, bool) or not isinstance(size, int):
        raise TypeError(f"哈希表大小必须是整数: {size!r}")
    if size <= 0:
        raise ValueError(f"哈希表大小必须为正整数: {size}")
