"""Synthetic test matrices: the lower part of a red-black ordered grid Laplacian."""

from __future__ import annotations

import logging
import math
import os
from itertools import accumulate
from typing import Iterable

from levelsolve.csr import CSRMatrix

logger = logging.getLogger(__name__)

PathLike = str | os.PathLike


def red_black_laplacian(n: int) -> CSRMatrix:
    """Lower triangle, diagonal included, of the 5-point Laplacian on a square grid.

    ``n`` is the number of grid points and must be a perfect square. Points are
    renumbered red first, then black; entries keep their stencil order, so the
    diagonal comes first in each row.
    """
    if n < 0:
        raise ValueError(f"n = {n} is not a perfect square")
    nx = math.isqrt(n)
    if nx * nx != n:
        raise ValueError(f"n = {n} is not a perfect square")

    def gid(ix: int, iy: int) -> int:
        return iy * nx + ix

    grid = [(ix, iy) for iy in range(nx) for ix in range(nx)]

    coo: list[tuple[int, int, float]] = []
    for ix, iy in grid:
        p = gid(ix, iy)
        coo.append((p, p, 4.0))
        if ix > 0:
            coo.append((p, gid(ix - 1, iy), -1.0))
        if ix < nx - 1:
            coo.append((p, gid(ix + 1, iy), -1.0))
        if iy > 0:
            coo.append((p, gid(ix, iy - 1), -1.0))
        if iy < nx - 1:
            coo.append((p, gid(ix, iy + 1), -1.0))

    black_count = sum(1 for ix, iy in grid if (ix + iy) & 1)
    next_red, next_black = 0, n - black_count
    perm = [0] * n
    for ix, iy in grid:
        p = gid(ix, iy)
        if (ix + iy) & 1:
            perm[p] = next_black
            next_black += 1
        else:
            perm[p] = next_red
            next_red += 1

    rows: list[list[tuple[int, float]]] = [[] for _ in range(n)]
    for r, c, v in coo:
        i, j = perm[r], perm[c]
        if j <= i:
            rows[i].append((j, v))

    return CSRMatrix(
        n=n,
        row_ptr=[0, *accumulate(len(row) for row in rows)],
        col_id=[col for row in rows for col, _ in row],
        val=[value for row in rows for _, value in row],
    )


def synthetic_file_name(n: int) -> str:
    """Default file name for the synthetic matrix with ``n`` rows."""
    return f"syn_matrix_n{n}.txt"


def _line(items: Iterable[str]) -> str:
    text = " ".join(items)
    return f"{text}\n" if text else ""


def write_synthetic(matrix: CSRMatrix, path: PathLike) -> None:
    """Write ``matrix`` in the CSR text format, values with 17 significant digits."""
    nnz = len(matrix.col_id)
    with open(path, "w", encoding="utf-8") as out:
        out.write(f"{matrix.n}\n")
        out.write(f"{len(matrix.row_ptr)}\n")
        out.write(_line(str(p) for p in matrix.row_ptr))
        out.write(f"{nnz}\n")
        out.write(_line(str(c) for c in matrix.col_id))
        out.write(f"{len(matrix.val)}\n")
        out.write(_line(f"{v:.17g}" for v in matrix.val))
    logger.info(
        "Finished: %s (%dx%d in lower CSR, %d nnz)",
        os.fspath(path),
        matrix.n,
        matrix.n,
        nnz,
    )