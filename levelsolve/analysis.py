"""Level scheduling of the dependency graph of a lower-triangular matrix."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import accumulate
from typing import Sequence

from levelsolve.csr import CSRMatrix

CYCLE_MESSAGE = "Cycle detected in dependency graph!"


class CycleError(RuntimeError):
    """The row dependency graph is not acyclic."""

    def __init__(self, message: str = CYCLE_MESSAGE) -> None:
        super().__init__(message)


@dataclass
class LevelGraph:
    """Levels together with the dependency lists they were built from."""

    levels: list[list[int]]
    dependents: list[list[int]]
    dependencies: list[list[int]]


@dataclass
class FlatLevels:
    """Levels and dependents packed into offset/value arrays."""

    level_ptr: list[int]
    level_rows: list[int]
    dep_ptr: list[int]
    dep_rows: list[int]

    def level(self, k: int) -> list[int]:
        """Rows of level ``k``."""
        return self.level_rows[self.level_ptr[k] : self.level_ptr[k + 1]]

    def dependents(self, row: int) -> list[int]:
        """Rows that need ``row`` to be solved first."""
        return self.dep_rows[self.dep_ptr[row] : self.dep_ptr[row + 1]]


@dataclass
class Schedule:
    """Per-rank communication plan for a level-by-level gather solve.

    ``level_counts`` and ``level_displs`` hold ``nprocs`` entries per level.
    """

    nprocs: int
    level_ptr: list[int]
    level_rows: list[int]
    level_counts: list[int]
    level_displs: list[int]
    send_rows_ptr: list[int]
    send_rows: list[int]
    recv_perm_ptr: list[int]
    recv_perm: list[int]

    def level(self, k: int) -> list[int]:
        """Rows of level ``k``."""
        return self.level_rows[self.level_ptr[k] : self.level_ptr[k + 1]]


def _dependency_lists(matrix: CSRMatrix) -> tuple[list[list[int]], list[list[int]]]:
    dependents: list[list[int]] = [[] for _ in range(matrix.n)]
    dependencies: list[list[int]] = [[] for _ in range(matrix.n)]
    for row in range(matrix.n):
        for col, _ in matrix.row_entries(row):
            if col < 0:
                raise ValueError(f"negative column index {col} in row {row}")
            if col < row:
                dependents[col].append(row)
                dependencies[row].append(col)
    return dependents, dependencies


def _kahn_levels(dependents: Sequence[Sequence[int]], in_degree: list[int]) -> list[list[int]]:
    remaining = list(in_degree)
    current = [row for row, degree in enumerate(remaining) if degree == 0]
    levels: list[list[int]] = []
    while current:
        levels.append(current)
        following: list[int] = []
        for row in current:
            for child in dependents[row]:
                remaining[child] -= 1
                if remaining[child] == 0:
                    following.append(child)
        current = following
    if any(remaining):
        raise CycleError()
    return levels


def _offsets(groups: Sequence[Sequence[int]]) -> list[int]:
    return [0, *accumulate(len(group) for group in groups)]


def level_scheduling(matrix: CSRMatrix) -> LevelGraph:
    """Group rows into levels; every row depends only on rows of earlier levels."""
    dependents, dependencies = _dependency_lists(matrix)
    levels = _kahn_levels(dependents, [len(deps) for deps in dependencies])
    return LevelGraph(levels=levels, dependents=dependents, dependencies=dependencies)


def level_scheduling_plain(matrix: CSRMatrix) -> FlatLevels:
    """Like :func:`level_scheduling`, with the results packed into flat arrays."""
    graph = level_scheduling(matrix)
    return FlatLevels(
        level_ptr=_offsets(graph.levels),
        level_rows=[row for level in graph.levels for row in level],
        dep_ptr=_offsets(graph.dependents),
        dep_rows=[row for deps in graph.dependents for row in deps],
    )


def build_schedules(
    matrix: CSRMatrix, row_owner: Sequence[int], rank: int, nprocs: int
) -> Schedule:
    """Work out level layout, gather counts and offsets, local rows and receive order."""
    if nprocs <= 0:
        raise ValueError(f"process count must be positive, got {nprocs}")
    if not 0 <= rank < nprocs:
        raise ValueError(f"rank {rank} out of range for {nprocs} processes")
    if len(row_owner) < matrix.n:
        raise ValueError("row_owner has fewer entries than the matrix has rows")
    if any(not 0 <= owner < nprocs for owner in row_owner[: matrix.n]):
        raise ValueError("row_owner names a process outside the communicator")

    levels = level_scheduling(matrix).levels

    level_counts: list[int] = []
    level_displs: list[int] = []
    send_rows: list[int] = []
    send_rows_ptr = [0]
    recv_perm: list[int] = []
    recv_perm_ptr = [0]
    for level in levels:
        counts = [0] * nprocs
        for row in level:
            counts[row_owner[row]] += 1
        level_counts.extend(counts)
        level_displs.extend([0, *accumulate(counts)][:nprocs])

        send_rows.extend(row for row in level if row_owner[row] == rank)
        send_rows_ptr.append(len(send_rows))

        for owner in range(nprocs):
            recv_perm.extend(row for row in level if row_owner[row] == owner)
        recv_perm_ptr.append(len(recv_perm))

    return Schedule(
        nprocs=nprocs,
        level_ptr=_offsets(levels),
        level_rows=[row for level in levels for row in level],
        level_counts=level_counts,
        level_displs=level_displs,
        send_rows_ptr=send_rows_ptr,
        send_rows=send_rows,
        recv_perm_ptr=recv_perm_ptr,
        recv_perm=recv_perm,
    )