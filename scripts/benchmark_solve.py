#!/usr/bin/env python3
"""Quick micro-benchmark for the grid circuit solve pipeline."""

from __future__ import annotations

import argparse
import time

from gridcircuit.analysis import analyze_topology
from gridcircuit.circuits.generators import parallel_ladder


def _bench_topology(rungs: int) -> float:
    circuit = parallel_ladder([100.0] * rungs, series=[10.0] * rungs)
    start = time.perf_counter()
    analyze_topology(circuit)
    return time.perf_counter() - start


def _bench_solve(rungs: int) -> float:
    circuit = parallel_ladder([100.0] * rungs, series=[10.0] * rungs)
    start = time.perf_counter()
    circuit.solve()
    return time.perf_counter() - start


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark topology discovery and the full solve.")
    parser.add_argument("--rungs", type=int, nargs="+", default=[4, 16, 64])
    parser.add_argument("--topology-only", action="store_true", help="Skip the full solve benchmark.")
    args = parser.parse_args()

    print("Topology benchmark:")
    for rungs in args.rungs:
        elapsed = _bench_topology(rungs)
        print(f"  rungs={rungs} -> {elapsed:.4f}s")

    if not args.topology_only:
        print("Solve benchmark:")
        for rungs in args.rungs:
            elapsed = _bench_solve(rungs)
            print(f"  rungs={rungs} -> {elapsed:.4f}s")


if __name__ == "__main__":
    main()
