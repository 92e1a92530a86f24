from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from storages import Storage, StorageConfig, compare_storages, load_workload, parse_workload_line


def build_sample_ops():
    sample = [
        "SET a 1",
        "SET b 2",
        "SET c 3",
        "GET a",
        "SET a 10",
        "GET a",
        "DEL b",
        "GET b",
        "SET d 4",
        "SET e 5",
        "GET e",
        "CLEAR",
        "GET a",
    ]
    return [parse_workload_line(line, line_no) for line_no, line in enumerate(sample, 1)]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="KV 存储后端回放工具")
    parser.add_argument("--workload", type=Path, help="workload 文本文件路径")
    parser.add_argument(
        "--initial-size",
        type=int,
        default=None,
        help="哈希表初始桶数（默认 4）",
    )
    parser.add_argument(
        "--storages",
        default="hashmap",
        help="要运行的后端列表，逗号分隔（如：hashmap,local,session）",
    )
    parser.add_argument("--verbose", action="store_true", help="输出扩容/缩容日志")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    initial_size = 0
    if args.workload:
        initial_size, ops = load_workload(args.workload)
    else:
        ops = build_sample_ops()
    if initial_size != 0:
        args.initial_size = initial_size
    print(f"哈希表初始大小: {args.initial_size or 'default'}")

    storage_names = [name.strip() for name in args.storages.split(",") if name.strip()]
    if not storage_names:
        raise ValueError("必须至少指定一种存储后端")

    storages = [
        Storage(name, StorageConfig(type=name, initial_size=args.initial_size))
        for name in storage_names
    ]

    compare_storages(storages, ops)


if __name__ == "__main__":
    main()
