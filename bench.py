from __future__ import annotations

import argparse
import csv
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from sortedcontainers import SortedList

from storages import ReplayStats, Storage, StorageConfig, load_workload, run_storage


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="批量多线程 KV 存储回放测试脚本")
    parser.add_argument(
        "--workload",
        nargs="+",
        required=True,
        help="要回放的 workload 文件路径（支持通配符）",
    )
    parser.add_argument(
        "--initial-sizes",
        required=False,
        help="逗号分隔的哈希表初始大小列表，例如：4,16,64；不填则使用文件首行或默认值",
    )
    parser.add_argument(
        "--storages",
        default="hashmap",
        help="要测试的后端列表，逗号分隔",
    )
    parser.add_argument(
        "--output-csv",
        type=Path,
        default=Path("benchmark_results.csv"),
        help="结果保存的 CSV 路径",
    )
    parser.add_argument(
        "--output-plot",
        type=Path,
        default=Path("load_factor.png"),
        help="桶数与负载因子曲线的输出路径",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=8,
        help="并行线程数",
    )
    parser.add_argument("--verbose", action="store_true", help="输出扩容/缩容日志")
    return parser.parse_args(argv)


def expand_workload_paths(patterns: Iterable[str]) -> List[Path]:
    paths: List[Path] = []
    for pattern in patterns:
        path = Path(pattern)
        if path.exists():
            paths.append(path)
            continue
        matched = sorted(Path().glob(pattern)) if not path.is_absolute() else []
        if not matched:
            raise FileNotFoundError(f"找不到 workload 文件：{pattern}")
        paths.extend(matched)
    return paths


def parse_initial_sizes(raw: Optional[str]) -> List[int]:
    if not raw:
        return [0]
    try:
        return [int(x.strip()) for x in raw.split(",") if x.strip()]
    except ValueError as exc:
        raise ValueError(f"无法解析初始大小列表：{raw}") from exc


def load_factor_percentiles(samples: Sequence[tuple]) -> tuple:
    if not samples:
        return 0.0, 0.0
    ordered = SortedList(load for _, load in samples)
    p50 = ordered[(len(ordered) - 1) // 2]
    p95 = ordered[min(len(ordered) - 1, int(len(ordered) * 0.95))]
    return p50, p95


def count_resizes(samples: Sequence[tuple]) -> int:
    return sum(1 for prev, cur in zip(samples, samples[1:]) if prev[0] != cur[0])


def run_single_case(workload_path: Path, storage_name: str, initial_size: int) -> dict:
    file_size, ops = load_workload(workload_path)
    size = initial_size or file_size or None
    # 每个 case 独占一份宿主 mapping，并行的 local case 互不干扰
    config = StorageConfig(type=storage_name, initial_size=size, host_store={})
    storage = Storage(storage_name, config)
    stats: ReplayStats = run_storage(storage, ops)
    p50, p95 = load_factor_percentiles(stats.samples)
    return {
        "workload": str(workload_path),
        "storage": stats.name,
        "initial_size": size or 0,
        "ops": stats.ops,
        "gets": stats.gets,
        "hits": stats.hits,
        "hit_rate": stats.hit_rate,
        "keys": stats.keys,
        "final_size": stats.samples[-1][0] if stats.samples else 0,
        "resizes": count_resizes(stats.samples),
        "load_p50": p50,
        "load_p95": p95,
        "samples": stats.samples,
    }


def save_results_csv(output_csv: Path, rows: Sequence[dict]) -> None:
    output_csv.parent.mkdir(parents=True, exist_ok=True)
    if not rows:
        return
    fieldnames = [name for name in rows[0].keys() if name != "samples"]
    with output_csv.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def plot_load_factor(output_plot: Path, rows: Sequence[dict]) -> None:
    rows = [row for row in rows if row["samples"]]
    if not rows:
        return
    fig, (ax_size, ax_load) = plt.subplots(2, 1, figsize=(10, 8), sharex=True)
    for row in rows:
        label = f"{Path(row['workload']).name} (init={row['initial_size'] or 'default'})"
        x = range(1, len(row["samples"]) + 1)
        ax_size.step(x, [size for size, _ in row["samples"]], where="post", label=label)
        ax_load.plot(x, [load for _, load in row["samples"]], label=label)

    ax_load.axhline(0.70, color="red", linestyle="--", alpha=0.6)
    ax_load.axhline(0.40, color="gray", linestyle="--", alpha=0.6)
    ax_size.set_ylabel("Buckets")
    ax_load.set_ylabel("Load Factor")
    ax_load.set_xlabel("Operation")
    ax_size.set_title("桶数与负载因子变化")
    for ax in (ax_size, ax_load):
        ax.grid(True, linestyle="--", alpha=0.5)
    ax_size.legend()
    output_plot.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_plot, dpi=180)
    plt.close(fig)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    workloads = expand_workload_paths(args.workload)
    initial_sizes = parse_initial_sizes(args.initial_sizes)
    storage_names = [name.strip() for name in args.storages.split(",") if name.strip()]

    results = []
    with ThreadPoolExecutor(max_workers=args.max_workers) as executor:
        future_to_case = {}
        for workload_path in workloads:
            for storage_name in storage_names:
                for initial_size in initial_sizes:
                    future = executor.submit(
                        run_single_case,
                        workload_path,
                        storage_name,
                        initial_size,
                    )
                    future_to_case[future] = (workload_path, storage_name, initial_size)

        for future in as_completed(future_to_case):
            workload_path, storage_name, initial_size = future_to_case[future]
            try:
                result = future.result()
                results.append(result)
                print(
                    f"[完成] workload={workload_path} storage={storage_name} "
                    f"init={initial_size or 'default'} resizes={result['resizes']} "
                    f"load_p95={result['load_p95']:.2f}"
                )
            except (ValueError, TypeError, RuntimeError) as exc:
                print(
                    f"[失败] workload={workload_path} storage={storage_name} "
                    f"init={initial_size or 'default'} error={exc}"
                )

    save_results_csv(args.output_csv, results)
    plot_load_factor(args.output_plot, results)
    print(f"结果已保存至 {args.output_csv}")
    print(f"负载因子曲线已保存至 {args.output_plot}")


if __name__ == "__main__":
    main()
