"""Compare cached objmap mappers against rebuilding descriptors on every call."""

import argparse
import json
import pathlib
import statistics
import sys
import time
from collections.abc import Callable

REPO_ROOT: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
CaseRunner = Callable[[int], None]

_CASE_DESCRIPTIONS: dict[str, str] = {
    "exact_cached": "Final dataclass mapped through its cached exact mapper.",
    "dynamic_cached": "Subclass mapped through a base declared type (runtime dispatch).",
    "tuple_cached": "Plain tuple mapped to positional items.",
    "uncached_rebuild": "Exact mapper rebuilt from scratch for every call.",
}


def _ensure_repo_paths() -> None:
    """Ensure the repository ``src`` directory is importable."""
    src_path: str = str(REPO_ROOT / "src")
    exists: bool = src_path in sys.path
    if exists is False:
        sys.path.insert(0, src_path)


def _build_cases() -> dict[str, CaseRunner]:
    """Build the benchmark case runners.

    :returns: Case runner by case name.
    """
    from objmap import map_of
    from objmap.builder import build_exact_mapper
    from objmap.demo import Dimensions
    from objmap.demo import Item
    from objmap.demo import PerishableItem
    from objmap.demo import Shipment
    from objmap.members import collect_members

    item = PerishableItem("sku-1", 12, "2026-11-01")
    shipment = Shipment("ship-1", item, Dimensions(1.0, 2.0, 3.0))
    pair: tuple[str, int] = ("Test", 1)

    def _exact_cached(iterations: int) -> None:
        for _ in range(iterations):
            map_of(shipment)

    def _dynamic_cached(iterations: int) -> None:
        for _ in range(iterations):
            map_of(item, Item)

    def _tuple_cached(iterations: int) -> None:
        for _ in range(iterations):
            map_of(pair)

    def _uncached_rebuild(iterations: int) -> None:
        mapper = build_exact_mapper(PerishableItem)
        for _ in range(iterations):
            mapper.descriptors = collect_members(PerishableItem)
            mapper(item)

    return {
        "exact_cached": _exact_cached,
        "dynamic_cached": _dynamic_cached,
        "tuple_cached": _tuple_cached,
        "uncached_rebuild": _uncached_rebuild,
    }


def _time_case(runner: CaseRunner, iterations: int, repetitions: int) -> dict[str, float]:
    """Time one case.

    :param runner: Case runner.
    :param iterations: Calls per repetition.
    :param repetitions: Number of timed repetitions.
    :returns: Aggregated timing stats.
    """
    samples: list[float] = []
    runner(min(iterations, 100))
    for _ in range(repetitions):
        started: float = time.perf_counter()
        runner(iterations)
        samples.append(time.perf_counter() - started)
    median_seconds: float = statistics.median(samples)
    return {
        "median_seconds": median_seconds,
        "median_us_per_op": median_seconds / iterations * 1_000_000.0,
        "min_seconds": min(samples),
    }


def _render_table(iterations: int, stats: dict[str, dict[str, float]]) -> str:
    """Render a summary table of benchmark results.

    :param iterations: Calls per repetition.
    :param stats: Aggregated stats by case.
    :returns: Rendered table text.
    """
    header: str = "Case                 Iter   Median(ms)   Median(us/op)"
    lines: list[str] = [header, "-" * len(header)]
    for case_name, case_stats in stats.items():
        median_ms: float = case_stats["median_seconds"] * 1_000.0
        line: str = f"{case_name:18} {iterations:8d} {median_ms:12.3f} {case_stats['median_us_per_op']:15.3f}"
        lines.append(line)
    return "\n".join(lines)


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments.

    :returns: Parsed arguments.
    """
    parser = argparse.ArgumentParser(description="Measure objmap mapping throughput.")
    parser.add_argument("--iterations", type=int, default=50_000, help="Calls per repetition.")
    parser.add_argument("--repetitions", type=int, default=5, help="Timed repetitions per case.")
    parser.add_argument(
        "--cases",
        type=str,
        default=None,
        help="Comma-separated subset of cases to run.",
    )
    parser.add_argument(
        "--json-output",
        type=str,
        default=None,
        help="Optional path to write raw benchmark output as JSON.",
    )
    return parser.parse_args()


def main() -> int:
    """Run the benchmark.

    :returns: Process exit code.
    """
    args: argparse.Namespace = _parse_args()
    if args.iterations < 1 or args.repetitions < 1:
        raise ValueError("iterations and repetitions must be >= 1")

    _ensure_repo_paths()
    cases: dict[str, CaseRunner] = _build_cases()
    selected: list[str] = list(cases)
    if args.cases is not None:
        selected = [name.strip() for name in args.cases.split(",") if len(name.strip()) > 0]
        unknown: list[str] = [name for name in selected if name not in cases]
        if len(unknown) > 0:
            raise ValueError(f"Unknown cases: {', '.join(unknown)}")

    stats: dict[str, dict[str, float]] = {}
    for case_name in selected:
        stats[case_name] = _time_case(cases[case_name], args.iterations, args.repetitions)

    print("objmap Performance Benchmark")
    print(f"Iterations per repetition: {args.iterations}")
    print(f"Repetitions per case: {args.repetitions}")
    print("")
    print(_render_table(args.iterations, stats))
    print("")
    print("Case descriptions:")
    for case_name in selected:
        print(f"- {case_name}: {_CASE_DESCRIPTIONS[case_name]}")

    if args.json_output is not None:
        json_path: pathlib.Path = pathlib.Path(args.json_output)
        json_path.write_text(json.dumps(stats, indent=2, sort_keys=True), encoding="utf-8")
        print("")
        print(f"Wrote raw benchmark JSON: {json_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
