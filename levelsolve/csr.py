"""Compressed sparse row matrices and the text formats they are stored in."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, TypeVar

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

PathLike = str | os.PathLike


@dataclass
class CSRMatrix:
    """A square sparse matrix in compressed sparse row form."""

    n: int
    row_ptr: list[int]
    col_id: list[int]
    val: list[float]

    def row_entries(self, row: int) -> list[tuple[int, float]]:
        """Return the (column, value) pairs stored for ``row``."""
        if not 0 <= row < self.n:
            raise IndexError(f"row {row} out of range for a matrix of order {self.n}")
        start, stop = self.row_ptr[row], self.row_ptr[row + 1]
        return list(zip(self.col_id[start:stop], self.val[start:stop]))


@dataclass(frozen=True)
class Triplet:
    """One nonzero entry given as (row, column, value)."""

    row: int
    col: int
    val: float


def _take(tokens: Iterator[str], kind: Callable[[str], _T], what: str) -> _T:
    try:
        token = next(tokens)
    except StopIteration:
        raise ValueError(f"CSR file ends before {what}") from None
    try:
        return kind(token)
    except ValueError:
        raise ValueError(f"invalid {what}: {token!r}") from None


def _read_array(tokens: Iterator[str], kind: Callable[[str], _T], name: str) -> list[_T]:
    size = _take(tokens, int, f"size of {name}")
    if size < 0:
        raise ValueError(f"negative size of {name}: {size}")
    return [_take(tokens, kind, f"{name} entry") for _ in range(size)]


def load_csr(path: PathLike) -> CSRMatrix:
    """Read a matrix stored as n, then row_ptr, col_id and val, each preceded by its size."""
    start = time.perf_counter()
    with open(path, encoding="utf-8") as fh:
        tokens = iter(fh.read().split())
    n = _take(tokens, int, "matrix order")
    row_ptr = _read_array(tokens, int, "row_ptr")
    col_id = _read_array(tokens, int, "col_id")
    val = _read_array(tokens, float, "val")
    logger.info(
        'CSR matrix loaded from "%s" in %s seconds.',
        os.fspath(path),
        time.perf_counter() - start,
    )
    return CSRMatrix(n=n, row_ptr=row_ptr, col_id=col_id, val=val)


def save_csr(matrix: CSRMatrix, path: PathLike) -> None:
    """Write ``matrix`` in the format :func:`load_csr` reads."""

    def line(items: Iterable[str]) -> str:
        return "".join(f"{item} " for item in items) + "\n"

    with open(path, "w", encoding="utf-8") as out:
        out.write(f"{matrix.n}\n")
        out.write(f"{len(matrix.row_ptr)}\n")
        out.write(line(str(p) for p in matrix.row_ptr))
        out.write(f"{len(matrix.col_id)}\n")
        out.write(line(str(c) for c in matrix.col_id))
        out.write(f"{len(matrix.val)}\n")
        out.write(line(f"{v:.16g}" for v in matrix.val))
    logger.info("CSR saved to: %s", os.fspath(path))


def _parse_triplet(line: str) -> Triplet | None:
    fields = line.split()
    if len(fields) < 3:
        return None
    try:
        row, col, value = int(fields[0]), int(fields[1]), float(fields[2])
    except ValueError:
        return None
    # Rows in the file are 1-based; columns are taken as they are.
    return Triplet(row - 1, col, value)


def read_triplets(path: PathLike) -> list[Triplet]:
    """Read ``row col value`` lines, skipping blank and unparsable ones."""
    with open(path, encoding="utf-8") as fh:
        parsed = (_parse_triplet(line) for line in fh if line.strip())
        return [t for t in parsed if t is not None]


def csr_from_triplets(triplets: Iterable[Triplet]) -> CSRMatrix:
    """Assemble a CSR matrix whose order is one more than the largest row index."""
    entries = sorted(triplets, key=lambda t: (t.row, t.col))
    if entries and entries[0].row < 0:
        raise ValueError(f"negative row index {entries[0].row}")
    n = entries[-1].row + 1 if entries else 0
    counts = [0] * n
    for t in entries:
        counts[t.row] += 1
    row_ptr = [0]
    for count in counts:
        row_ptr.append(row_ptr[-1] + count)
    return CSRMatrix(
        n=n,
        row_ptr=row_ptr,
        col_id=[t.col for t in entries],
        val=[t.val for t in entries],
    )


def load_csr_from_triplet_file(path: PathLike) -> CSRMatrix:
    """Read a triplet file and assemble it into a CSR matrix."""
    return csr_from_triplets(read_triplets(path))