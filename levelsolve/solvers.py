"""Serial and simulated-parallel solvers for sparse lower-triangular systems.

The parallel solvers run every rank of a distributed solve in one process.
Each rank keeps its own copy of the solution vector. Collective and
point-to-point exchanges are carried out in memory, in the order the
distributed algorithm would carry them out.
"""

from __future__ import annotations

from collections import deque
from itertools import accumulate
from typing import Sequence

from levelsolve.analysis import FlatLevels, LevelGraph, Schedule
from levelsolve.csr import CSRMatrix


def _check_vectors(matrix: CSRMatrix, b: Sequence[float], x: Sequence[float]) -> None:
    if len(b) < matrix.n:
        raise ValueError(f"right-hand side has {len(b)} entries, need {matrix.n}")
    if len(x) < matrix.n:
        raise ValueError(f"solution vector has {len(x)} entries, need {matrix.n}")


def _row_value(matrix: CSRMatrix, row: int, b: Sequence[float], x: Sequence[float]) -> float:
    """Solve one row, taking the last stored entry of the row as its diagonal."""
    start, stop = matrix.row_ptr[row], matrix.row_ptr[row + 1]
    if stop <= start:
        raise ValueError(f"row {row} has no stored entries")
    diag = matrix.val[stop - 1]
    total = 0.0
    for col, value in zip(matrix.col_id[start:stop], matrix.val[start:stop]):
        total += value * x[col]
    return (b[row] - total) / diag


def serial_triangular_solve(
    matrix: CSRMatrix, b: Sequence[float], x: Sequence[float]
) -> list[float]:
    """Forward substitution row by row, starting from the values in ``x``.

    The last entry stored in each row is taken as the diagonal. Returns a new
    vector; ``x`` is left unchanged.
    """
    _check_vectors(matrix, b, x)
    result = list(x)
    for row in range(matrix.n):
        result[row] = _row_value(matrix, row, b, result)
    return result


def allgatherv(
    contributions: Sequence[Sequence[float]],
    counts: Sequence[int],
    displs: Sequence[int],
) -> list[float]:
    """Place each rank's contribution at its displacement in one shared buffer."""
    if not len(contributions) == len(counts) == len(displs):
        raise ValueError("contributions, counts and displs must have one entry per rank")
    for rank, (part, count, displ) in enumerate(zip(contributions, counts, displs)):
        if count < 0 or displ < 0:
            raise ValueError(f"rank {rank} has a negative count or displacement")
        if len(part) != count:
            raise ValueError(f"rank {rank} sends {len(part)} values but {count} are expected")
    size = max((displ + count for count, displ in zip(counts, displs)), default=0)
    buffer = [0.0] * size
    for part, displ in zip(contributions, displs):
        buffer[displ : displ + len(part)] = part
    return buffer


def parallel_solve_fast(
    matrix: CSRMatrix,
    schedules: Sequence[Schedule],
    b: Sequence[float],
    x: Sequence[float],
) -> list[float]:
    """Level-by-level solve driven by precomputed schedules, one per rank.

    ``schedules[r]`` must be the schedule built for rank ``r``. Returns the
    solution held by rank 0; every rank ends with the same vector.
    """
    _check_vectors(matrix, b, x)
    nprocs = len(schedules)
    if nprocs == 0:
        raise ValueError("at least one schedule is needed")
    if any(schedule.nprocs != nprocs for schedule in schedules):
        raise ValueError("every schedule must be built for the same number of ranks")
    num_levels = len(schedules[0].level_ptr) - 1
    if any(len(schedule.level_ptr) - 1 != num_levels for schedule in schedules):
        raise ValueError("schedules disagree on the number of levels")

    local = [list(x) for _ in schedules]
    for k in range(num_levels):
        sendbufs = [
            [
                _row_value(matrix, row, b, xr)
                for row in schedule.send_rows[schedule.send_rows_ptr[k] : schedule.send_rows_ptr[k + 1]]
            ]
            for schedule, xr in zip(schedules, local)
        ]
        window = slice(k * nprocs, (k + 1) * nprocs)
        for schedule, xr in zip(schedules, local):
            received = allgatherv(sendbufs, schedule.level_counts[window], schedule.level_displs[window])
            perm = schedule.recv_perm[schedule.recv_perm_ptr[k] : schedule.recv_perm_ptr[k + 1]]
            for row, value in zip(perm, received):
                xr[row] = value
    return local[0]


def parallel_solve_block(
    matrix: CSRMatrix,
    b: Sequence[float],
    x: Sequence[float],
    levels: FlatLevels,
    row_owner: Sequence[int],
    nprocs: int,
) -> list[float]:
    """Level-by-level solve that works out gather counts and order as it goes.

    Returns the solution held by rank 0; every rank ends with the same vector.
    """
    _check_vectors(matrix, b, x)
    if nprocs <= 0:
        raise ValueError(f"process count must be positive, got {nprocs}")
    if len(row_owner) < matrix.n:
        raise ValueError("row_owner has fewer entries than the matrix has rows")
    if any(not 0 <= owner < nprocs for owner in row_owner[: matrix.n]):
        raise ValueError("row_owner names a process outside the communicator")

    local = [list(x) for _ in range(nprocs)]
    for k in range(len(levels.level_ptr) - 1):
        level = levels.level(k)
        counts = [0] * nprocs
        for row in level:
            counts[row_owner[row]] += 1
        displs = [0, *accumulate(counts)][:nprocs]
        sendbufs = [
            [_row_value(matrix, row, b, xr) for row in level if row_owner[row] == rank]
            for rank, xr in enumerate(local)
        ]
        order = [row for owner in range(nprocs) for row in level if row_owner[row] == owner]
        for xr in local:
            received = allgatherv(sendbufs, counts, displs)
            for row, value in zip(order, received):
                xr[row] = value
    return local[0]


def parallel_solve_p2p(
    matrix: CSRMatrix,
    b: Sequence[float],
    x: Sequence[float],
    graph: LevelGraph,
    nprocs: int,
) -> list[float]:
    """Solve with round-robin rows and one message per value a remote rank needs.

    The diagonal is the entry whose column equals the row. Returns the vector
    assembled from the rows each rank owns.
    """
    _check_vectors(matrix, b, x)
    if nprocs <= 0:
        raise ValueError(f"process count must be positive, got {nprocs}")
    n = matrix.n
    local = [list(x) for _ in range(nprocs)]
    computed: list[set[int]] = [set() for _ in range(nprocs)]
    received: list[set[int]] = [set() for _ in range(nprocs)]
    sent: list[set[int]] = [set() for _ in range(nprocs)]
    # Messages keyed by (destination, source, tag); the tag is the row number.
    mailbox: dict[tuple[int, int, int], deque[float]] = {}

    for level in graph.levels:
        for rank in range(nprocs):
            xr = local[rank]
            owned = [row for row in level if row % nprocs == rank]

            needed = sorted(
                {
                    dep
                    for row in owned
                    if row not in computed[rank]
                    for dep in graph.dependencies[row]
                    if dep % nprocs != rank and dep not in received[rank]
                }
            )
            for dep in needed:
                queue = mailbox.get((rank, dep % nprocs, dep))
                if not queue:
                    raise RuntimeError(f"rank {rank} waits for row {dep}, which is never sent")
                xr[dep] = queue.popleft()
                received[rank].add(dep)

            for row in owned:
                if row in computed[rank]:
                    continue
                diag = 0.0
                total = 0.0
                start, stop = matrix.row_ptr[row], matrix.row_ptr[row + 1]
                for col, value in zip(matrix.col_id[start:stop], matrix.val[start:stop]):
                    if col == row:
                        diag = value
                    else:
                        total += value * xr[col]
                xr[row] = (b[row] - total) / diag
                computed[rank].add(row)

            for row in owned:
                if row not in computed[rank] or row in sent[rank]:
                    continue
                targets = sorted({dep % nprocs for dep in graph.dependents[row]} - {rank})
                for dst in targets:
                    mailbox.setdefault((dst, rank, row), deque()).append(xr[row])
                sent[rank].add(row)

    return [local[row % nprocs][row] for row in range(n)]