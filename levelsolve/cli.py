"""Command that loads a matrix, schedules it and runs the level-gather solve."""

from __future__ import annotations

import argparse
import os
import sys
import time
from typing import Sequence

from levelsolve.analysis import CycleError, build_schedules
from levelsolve.csr import load_csr
from levelsolve.partition import row_owner_block
from levelsolve.solvers import parallel_solve_fast

PathLike = str | os.PathLike

DEFAULT_OUTPUT = "Parallel_solution.txt"
DEFAULT_ITERATIONS = 1000


def save_solution(x: Sequence[float], path: PathLike) -> None:
    """Write one value per line in fixed notation with 16 decimals."""
    with open(path, "w", encoding="utf-8") as out:
        out.writelines(f"{value:.16f}\n" for value in x)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="levelsolve",
        description="Solve L x = 1 for a lower-triangular CSR matrix, level by level.",
    )
    parser.add_argument("csr_filename", help="matrix in CSR text format")
    parser.add_argument("--procs", type=int, default=1, help="number of ranks to simulate")
    parser.add_argument(
        "--iterations", type=int, default=DEFAULT_ITERATIONS, help="number of repeated solves"
    )
    parser.add_argument("--output", default=DEFAULT_OUTPUT, help="where to write the solution")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the solver; returns the process exit status."""
    args = _parser().parse_args(argv)

    print("Loading A in CSR format...")
    try:
        matrix = load_csr(args.csr_filename)
    except OSError:
        print(f"Cannot open file: {args.csr_filename}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"[rank0]  Matrix loaded: n = {matrix.n}, nnz = {len(matrix.val)}")

    b = [1.0] * matrix.n
    x = [0.0] * matrix.n
    print(f"Broadcast of CSRMatrix completed. Matrix n = {matrix.n}")
    print()

    start = time.perf_counter()
    try:
        row_owner = row_owner_block(matrix.n, args.procs)
        schedules = [
            build_schedules(matrix, row_owner, rank, args.procs) for rank in range(args.procs)
        ]
        for _ in range(args.iterations):
            x = parallel_solve_fast(matrix, schedules, b, x)
    except (CycleError, ValueError, IndexError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    total_time = time.perf_counter() - start
    comm_time = 0.0

    print(f"Max comm_time across all ranks: {comm_time:f} s")
    print(f"Avg comm_time across all ranks: {comm_time:f} s")
    print(f"Max total_time across all ranks: {total_time:f} s")
    print(f"Avg total_time across all ranks: {total_time:f} s")

    try:
        save_solution(x, args.output)
    except OSError:
        print("Error: cannot open file for writing solution.", file=sys.stderr)
        return 1
    print("Solution x Saved.")
    return 0


if __name__ == "__main__":
    sys.exit(main())