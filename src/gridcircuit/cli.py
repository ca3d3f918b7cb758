"""Command line entry point for solving grid circuit layouts."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional, TextIO

from gridcircuit.circuits import generators
from gridcircuit.circuits.grid import Circuit
from gridcircuit.circuits.layout_io import load_layout
from gridcircuit.errors import CircuitNotSolvableError, CircuitValidationError


LOG_LEVEL_ENV = "GRIDCIRCUIT_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_log_level() -> str:
    """Return the configured log level name."""
    return os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()


def format_potentials(circuit: Circuit) -> str:
    lines = []
    for row in range(circuit.rows):
        cells = []
        for col in range(circuit.cols):
            terminal = circuit.terminal(row, col)
            cells.append(f"{terminal.potential:8.4f}" if terminal.has_potential else "       -")
        lines.append("  ".join(cells))
    return "\n".join(lines)


def report(circuit: Circuit, show_potentials: bool = False, stream: Optional[TextIO] = None) -> int:
    """Solve ``circuit`` and write the branch report; return a process exit code."""
    stream = stream or sys.stdout
    try:
        currents = circuit.solve()
    except CircuitNotSolvableError as exc:
        print(str(circuit), file=stream)
        print(f"Error: {exc}", file=stream)
        return 1

    print(str(circuit), file=stream)
    for branch, current in enumerate(currents):
        print(f"Current in branch {branch} is {current:.6g}", file=stream)
    if show_potentials:
        print("\nTerminal potentials:", file=stream)
        print(format_potentials(circuit), file=stream)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solve resistive DC grid circuits.")
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or {DEFAULT_LOG_LEVEL}).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    solve = sub.add_parser("solve", help="Solve a JSON circuit layout.")
    solve.add_argument("layout", help="Path to the layout JSON file.")
    solve.add_argument("--potentials", action="store_true", help="Print the terminal potential grid.")

    demo = sub.add_parser("demo", help="Solve a built-in reference circuit.")
    demo.add_argument("name", choices=generators.available(), help="Reference circuit name.")
    demo.add_argument("--potentials", action="store_true", help="Print the terminal potential grid.")
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = args.log_level or get_log_level()
    if level not in LOG_LEVELS:
        print(
            f"Error: invalid {LOG_LEVEL_ENV} value {level!r}; expected one of {', '.join(LOG_LEVELS)}.",
            file=sys.stderr,
        )
        return 2
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "solve":
        try:
            circuit = load_layout(args.layout)
        except (OSError, CircuitValidationError) as exc:
            print(f"Error: cannot load layout {args.layout}: {exc}", file=sys.stderr)
            return 2
    else:
        circuit = generators.generate(args.name)
    return report(circuit, show_potentials=args.potentials)


if __name__ == "__main__":
    raise SystemExit(main())
