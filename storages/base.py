from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, MutableMapping, Optional, Sequence, Tuple

# (op, key, value)，op 为 SET / GET / DEL / CLEAR
WorkloadOp = Tuple[str, Optional[str], Optional[str]]

OP_ARITY = {"SET": 3, "GET": 2, "DEL": 2, "CLEAR": 1}


@dataclass
class StorageConfig:
    type: str = "hashmap"
    initial_size: Optional[int] = None
    # "local" 后端的宿主 mapping；None 表示进程内共享的那一份
    host_store: Optional[MutableMapping[str, str]] = None


@dataclass
class ReplayStats:
    name: str
    ops: int = 0
    gets: int = 0
    hits: int = 0
    keys: int = 0
    # 仅哈希表后端：每个操作之后的 (size, load_factor)
    samples: List[Tuple[int, float]] = field(default_factory=list)

    @property
    def hit_rate(self) -> float:
        return self.hits / self.gets if self.gets else 0.0


class BaseStorage:
    """存储后端基类，所有后端实现同一组 6 个方法。"""

    name: str = "base"

    def set_item(self, key: str, value: str) -> None:  # pragma: no cover - 子类覆写
        raise NotImplementedError

    def get_item(self, key: str) -> Optional[str]:  # pragma: no cover - 子类覆写
        raise NotImplementedError

    def remove_item(self, key: str) -> None:  # pragma: no cover - 子类覆写
        raise NotImplementedError

    def clear(self) -> None:  # pragma: no cover - 子类覆写
        raise NotImplementedError

    def key_exists(self, key: str) -> bool:  # pragma: no cover - 子类覆写
        raise NotImplementedError

    def keys(self) -> List[str]:  # pragma: no cover - 子类覆写
        raise NotImplementedError


def parse_workload_line(line: str, line_no: int = 0) -> WorkloadOp:
    """Parse a line like "SET k v" into (op, key, value)."""
    parts = line.split()
    op = parts[0].upper()
    arity = OP_ARITY.get(op)
    if arity is None:
        raise ValueError(f"第 {line_no} 行未知操作：{line}")
    if len(parts) != arity:
        raise ValueError(f"第 {line_no} 行参数个数错误：{line}")
    key = parts[1] if arity > 1 else None
    value = parts[2] if arity > 2 else None
    return op, key, value


def load_workload(path: Path) -> Tuple[int, List[WorkloadOp]]:
    """读取文本 workload。

    格式示例（首行可选，为哈希表初始大小）：
        4
        SET a 1
        GET a
        DEL a
        CLEAR
    """

    raw_lines = path.read_text(encoding="utf-8").splitlines()
    numbered = [
        (line_no, line.strip())
        for line_no, line in enumerate(raw_lines, 1)
        if line.strip() and not line.strip().startswith("#")
    ]
    initial_size = 0
    if numbered and numbered[0][1].isdigit():
        initial_size = int(numbered[0][1])
        numbered = numbered[1:]

    ops = [parse_workload_line(line, line_no) for line_no, line in numbered]
    return initial_size, ops


def run_storage(storage: BaseStorage, ops: Iterable[WorkloadOp]) -> ReplayStats:
    stats = ReplayStats(name=storage.name)
    table = getattr(storage, "backend", storage)
    sample = hasattr(table, "load_factor")
    for op, key, value in ops:
        stats.ops += 1
        if op == "SET":
            storage.set_item(key, value)
            if storage.get_item(key) != value:
                raise RuntimeError(f"后端 {storage.name} 写入后读不到 key {key}")
        elif op == "GET":
            stats.gets += 1
            if storage.get_item(key) is not None:
                stats.hits += 1
        elif op == "DEL":
            storage.remove_item(key)
            if storage.key_exists(key):
                raise RuntimeError(f"后端 {storage.name} 删除后仍存在 key {key}")
        elif op == "CLEAR":
            storage.clear()
        else:
            raise ValueError(f"未知操作: {op}")
        if sample:
            stats.samples.append((table.size, table.load_factor))
    stats.keys = len(storage.keys())
    return stats


def compare_storages(storages: Sequence[BaseStorage], ops: Sequence[WorkloadOp]) -> List[ReplayStats]:
    print("=== 存储后端对比 ===")
    header = "{:<12} {:>10} {:>10} {:>10} {:>10} {:>8}".format(
        "Storage", "Ops", "Gets", "HitRate", "Keys", "Size"
    )
    print(header)
    print("-" * len(header))
    results = []
    for storage in storages:
        stats = run_storage(storage, ops)
        size = stats.samples[-1][0] if stats.samples else "-"
        print(
            "{:<12} {:>10} {:>10} {:>9.2%} {:>10} {:>8}".format(
                stats.name, stats.ops, stats.gets, stats.hit_rate, stats.keys, size
            )
        )
        results.append(stats)
    print("=" * len(header))
    return results
